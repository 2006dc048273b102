from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.quests.schemas import QuestCreate, QuestResponse
from app.modules.quests.service import QuestService
from app.modules.geocoding.routes import get_geocoding_service
from app.modules.geocoding.service import GeocodingService
from app.core.dependencies import get_current_user_id, get_hub
from app.core.realtime import RealtimeHub
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/quests", tags=["quests"])


def get_quest_service(
    supabase: Client = Depends(get_supabase),
    geocoder: GeocodingService = Depends(get_geocoding_service),
    hub: RealtimeHub = Depends(get_hub)
) -> QuestService:
    return QuestService(supabase, geocoder, hub)


@router.post("", response_model=QuestResponse, status_code=201)
async def create_quest(
    quest_data: QuestCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: QuestService = Depends(get_quest_service)
):
    """Create a quest owned by the current user (location is geocoded first)"""
    return service.create_quest(quest_data, user_data["id"])


@router.get("", response_model=List[QuestResponse])
async def list_quests(
    active_only: bool = True,
    user_data: Dict = Depends(get_current_user_id),
    service: QuestService = Depends(get_quest_service)
):
    """List quests; by default only those that have not ended yet"""
    if active_only:
        return service.list_active_quests()
    return service.list_quests()


@router.get("/{quest_id}", response_model=QuestResponse)
async def get_quest(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: QuestService = Depends(get_quest_service)
):
    """Get quest by ID"""
    return service.get_quest(quest_id)


@router.delete("/{quest_id}", status_code=204)
async def end_quest(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: QuestService = Depends(get_quest_service)
):
    """End (delete) a quest. Owner only."""
    service.delete_quest(quest_id, user_data["id"])
    return None
