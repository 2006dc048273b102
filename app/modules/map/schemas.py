from pydantic import BaseModel
from typing import Optional, List, Dict, Literal
import datetime as dt


QuestAction = Literal["join", "leave", "end"]

ACTION_FOR_RELATIONSHIP = {
    "owner": "end",
    "participant": "leave",
    "none": "join",
}


class QuestCard(BaseModel):
    """What a marker shows for one quest"""
    quest_id: str
    title: str
    category: str
    date: dt.date
    start_time: str
    end_time: str
    overnight: bool
    details: Optional[str] = None
    location: str
    participant_count: int
    composition: Dict[str, int]
    creator_id: str
    creator_name: str
    relationship: str
    action: QuestAction


class Marker(BaseModel):
    id: str
    lat: float
    lng: float
    quests: List[QuestCard]


class Cluster(BaseModel):
    id: str
    lat: float
    lng: float
    marker_ids: List[str]
    quest_count: int
    categories: Dict[str, int]


class Camera(BaseModel):
    lat: float
    lng: float
    zoom: int


class MapView(BaseModel):
    camera: Camera
    markers: List[Marker]  # markers not absorbed into a cluster
    clusters: List[Cluster]
