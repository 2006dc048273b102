from pydantic import BaseModel
from typing import List, Optional


class Coordinates(BaseModel):
    lat: float
    lng: float
    formatted_address: Optional[str] = None


class Suggestion(BaseModel):
    label: str
    place_id: str


class AutocompleteResponse(BaseModel):
    query: str
    suggestions: List[Suggestion]
