from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime


Gender = Literal["male", "female", "other"]


class ProfileResponse(BaseModel):
    id: str
    display_name: Optional[str] = None
    gender: Optional[Gender] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def name(self) -> str:
        return self.display_name or "Anonymous"
