from supabase import Client
from app.core.realtime import BOARD_CHANNEL, RealtimeHub
from app.modules.participants.schemas import (
    ParticipantResponse, ParticipantListResponse, MembershipResponse
)
from app.modules.profiles.service import ProfileService, display_name, gender_composition
from app.modules.quests.schemas import QuestResponse
from app.modules.quests.service import QuestService
from typing import Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ParticipantService:
    def __init__(self, supabase: Client, hub: Optional[RealtimeHub] = None):
        self.supabase = supabase
        self.hub = hub
        self.quests = QuestService(supabase)
        self.profiles = ProfileService(supabase)

    def _publish(self, quest_id: str, user_id: str) -> None:
        if self.hub is not None:
            self.hub.publish(BOARD_CHANNEL, {
                "type": "membership_changed",
                "quest_id": quest_id,
                "user_id": user_id,
            })

    def _participant_rows(self, quest_ids: List[str]) -> List[dict]:
        if not quest_ids:
            return []
        result = self.supabase.table("quest_participants")\
            .select("*")\
            .in_("quest_id", quest_ids)\
            .order("created_at")\
            .execute()
        return result.data or []

    def member_ids(self, quest: QuestResponse, rows: Optional[List[dict]] = None) -> List[str]:
        """Owner first, then participants in join order. A stray row for the owner is ignored."""
        if rows is None:
            rows = self._participant_rows([quest.id])
        ids = [quest.user_id]
        for row in rows:
            if row["quest_id"] == quest.id and row["user_id"] not in ids:
                ids.append(row["user_id"])
        return ids

    def members_by_quest(self, quests: List[QuestResponse]) -> Dict[str, List[str]]:
        """member_ids for many quests with a single participants query"""
        try:
            rows = self._participant_rows([q.id for q in quests])
            return {q.id: self.member_ids(q, rows) for q in quests}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def relationship(self, quest: QuestResponse, user_id: str, members: Optional[List[str]] = None) -> str:
        if quest.user_id == user_id:
            return "owner"
        if members is None:
            members = self.member_ids(quest)
        return "participant" if user_id in members else "none"

    def is_member(self, quest_id: str, user_id: str) -> bool:
        quest = self.quests.get_quest(quest_id)
        return self.relationship(quest, user_id) != "none"

    def list_participants(self, quest_id: str, quest: Optional[QuestResponse] = None) -> ParticipantListResponse:
        """Members of a quest including the implicit owner, exactly once each"""
        try:
            quest = quest or self.quests.get_quest(quest_id)
            rows = self._participant_rows([quest.id])
            ids = self.member_ids(quest, rows)
            joined = {row["user_id"]: row.get("created_at") for row in rows}
            profiles = self.profiles.get_profiles(ids)

            participants = []
            for user_id in ids:
                profile = profiles.get(user_id)
                participants.append(ParticipantResponse(
                    user_id=user_id,
                    display_name=display_name(profiles, user_id),
                    gender=profile.gender if profile else None,
                    is_owner=user_id == quest.user_id,
                    joined_at=quest.created_at if user_id == quest.user_id else joined.get(user_id),
                ))
            return ParticipantListResponse(
                quest_id=quest.id,
                owner_id=quest.user_id,
                participants=participants,
                count=len(participants),
                composition=gender_composition(profiles, ids),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def join(self, quest_id: str, user_id: str) -> MembershipResponse:
        """Join a quest. Joining twice, or joining your own quest, changes nothing."""
        try:
            quest = self.quests.get_quest(quest_id)
            if quest.user_id != user_id:
                result = self.supabase.table("quest_participants").upsert(
                    {"quest_id": quest_id, "user_id": user_id},
                    on_conflict="quest_id,user_id",
                    ignore_duplicates=True,
                ).execute()
                if result.data:
                    logger.info(f"User {user_id} joined quest {quest_id}")
                    self._publish(quest_id, user_id)
            # Re-read instead of trusting the write response
            participants = self.list_participants(quest_id, quest)
            return MembershipResponse(
                quest_id=quest_id,
                user_id=user_id,
                relationship=self.relationship(quest, user_id, [p.user_id for p in participants.participants]),
                participants=participants,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def leave(self, quest_id: str, user_id: str) -> MembershipResponse:
        """Leave a quest. No-op when not a participant; the owner has to end the quest instead."""
        try:
            quest = self.quests.get_quest(quest_id)
            if quest.user_id == user_id:
                raise HTTPException(status_code=400, detail="The quest owner cannot leave; end the quest instead")

            result = self.supabase.table("quest_participants")\
                .delete()\
                .eq("quest_id", quest_id)\
                .eq("user_id", user_id)\
                .execute()
            if result.data:
                logger.info(f"User {user_id} left quest {quest_id}")
                self._publish(quest_id, user_id)

            participants = self.list_participants(quest_id, quest)
            return MembershipResponse(
                quest_id=quest_id,
                user_id=user_id,
                relationship="none",
                participants=participants,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
