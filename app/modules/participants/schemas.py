from pydantic import BaseModel
from typing import Optional, List, Dict, Literal
from datetime import datetime


Relationship = Literal["owner", "participant", "none"]


class ParticipantResponse(BaseModel):
    user_id: str
    display_name: str
    gender: Optional[str] = None
    is_owner: bool = False
    joined_at: Optional[datetime] = None


class ParticipantListResponse(BaseModel):
    quest_id: str
    owner_id: str
    participants: List[ParticipantResponse]  # owner first
    count: int
    composition: Dict[str, int]


class MembershipResponse(BaseModel):
    quest_id: str
    user_id: str
    relationship: Relationship
    participants: ParticipantListResponse
