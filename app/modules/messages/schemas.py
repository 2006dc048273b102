from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class MessageCreate(BaseModel):
    content: Optional[str] = None


class MessageResponse(BaseModel):
    id: str
    quest_id: str
    user_id: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class ReadReceiptResponse(BaseModel):
    message_id: str
    quest_id: str
    user_id: str
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageStatus(BaseModel):
    message_id: str
    sender_id: str
    seen_by: List[str]  # readers other than the sender
    seen_by_others: bool


class MarkAllReadResponse(BaseModel):
    quest_id: str
    marked: int
