from pydantic import BaseModel
from typing import Optional, List, Dict, Any
import datetime as dt

from app.modules.map.schemas import MapView
from app.modules.messages.schemas import MessageResponse, MessageStatus
from app.modules.participants.schemas import ParticipantListResponse
from app.modules.quests.schemas import QuestCreate, QuestResponse


class FilterParams(BaseModel):
    categories: List[str] = []
    date: Optional[dt.date] = None
    time_from: Optional[str] = None
    time_to: Optional[str] = None


class OpenQuest(BaseModel):
    quest: QuestResponse
    participants: ParticipantListResponse
    relationship: str
    action: str
    messages: Optional[List[MessageResponse]] = None  # chat view only
    statuses: Optional[List[MessageStatus]] = None


class BoardSnapshot(BaseModel):
    mode: str
    quest_id: Optional[str] = None
    filters: Dict[str, Any]
    map: MapView
    unread: Dict[str, int]
    open_quest: Optional[OpenQuest] = None


class BoardCommand(BaseModel):
    """One frame sent by the client over the board WebSocket"""
    action: str
    quest_id: Optional[str] = None
    quest: Optional[QuestCreate] = None
    filters: Optional[FilterParams] = None
    content: Optional[str] = None
    text: Optional[str] = None
    zoom: Optional[int] = None
    watermarks: Optional[Dict[str, dt.datetime]] = None
