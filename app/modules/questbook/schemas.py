from pydantic import BaseModel
from typing import List, Literal, get_args


ReflectionCategory = Literal["stressed", "burnout", "sleep"]
REFLECTION_CATEGORIES = get_args(ReflectionCategory)


class Quote(BaseModel):
    text: str
    author: str


class QuotesResponse(BaseModel):
    date: str
    quotes: List[Quote]
    fallback: bool = False


class ReflectionResponse(BaseModel):
    date: str
    category: ReflectionCategory
    question: str
    fallback: bool = False
