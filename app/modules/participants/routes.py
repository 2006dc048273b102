from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.participants.schemas import ParticipantListResponse, MembershipResponse
from app.modules.participants.service import ParticipantService
from app.core.dependencies import get_current_user_id, get_hub
from app.core.realtime import RealtimeHub
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/quests", tags=["participants"])


def get_participant_service(
    supabase: Client = Depends(get_supabase),
    hub: RealtimeHub = Depends(get_hub)
) -> ParticipantService:
    return ParticipantService(supabase, hub)


@router.post("/{quest_id}/participants", response_model=MembershipResponse)
async def join_quest(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ParticipantService = Depends(get_participant_service)
):
    """Join a quest (idempotent)"""
    return service.join(quest_id, user_data["id"])


@router.delete("/{quest_id}/participants/me", response_model=MembershipResponse)
async def leave_quest(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ParticipantService = Depends(get_participant_service)
):
    """Leave a quest (no-op when not a participant)"""
    return service.leave(quest_id, user_data["id"])


@router.get("/{quest_id}/participants", response_model=ParticipantListResponse)
async def list_participants(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ParticipantService = Depends(get_participant_service)
):
    """Members of a quest, owner first"""
    return service.list_participants(quest_id)
