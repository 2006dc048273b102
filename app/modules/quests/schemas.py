from pydantic import BaseModel
from typing import Optional, Literal, get_args
import datetime as dt


QuestCategory = Literal["food", "study", "fitness", "errands", "others"]
QUEST_CATEGORIES = get_args(QuestCategory)


class QuestCreate(BaseModel):
    # Required fields are checked by QuestService so blanks surface as ValidationError
    title: Optional[str] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    details: Optional[str] = None
    location: Optional[str] = None


class QuestResponse(BaseModel):
    id: str
    user_id: str
    title: str
    category: QuestCategory
    date: dt.date
    start_time: str
    end_time: str
    details: Optional[str] = None
    location: str
    latitude: float
    longitude: float
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
