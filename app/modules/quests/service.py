from supabase import Client
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.realtime import BOARD_CHANNEL, RealtimeHub, messages_channel, reads_channel
from app.modules.quests import schedule
from app.modules.quests.schemas import QuestCreate, QuestResponse, QUEST_CATEGORIES
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "category", "date", "start_time", "end_time", "location")


class QuestService:
    def __init__(self, supabase: Client, geocoder=None, hub: Optional[RealtimeHub] = None):
        self.supabase = supabase
        self.geocoder = geocoder
        self.hub = hub

    def _publish(self, event_type: str, quest_id: str) -> None:
        if self.hub is not None:
            self.hub.publish(BOARD_CHANNEL, {"type": event_type, "quest_id": quest_id})

    def validate_quest(self, quest_data: QuestCreate) -> QuestCreate:
        """Check required fields. Raises ValidationError naming the first missing one."""
        for field in REQUIRED_FIELDS:
            value = getattr(quest_data, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"{field.replace('_', ' ').capitalize()} is required")
        category = quest_data.category.strip().lower()
        if category not in QUEST_CATEGORIES:
            raise ValidationError(f"Category must be one of: {', '.join(QUEST_CATEGORIES)}")
        try:
            start = schedule.format_time(schedule.parse_time(quest_data.start_time))
            end = schedule.format_time(schedule.parse_time(quest_data.end_time))
        except ValueError as e:
            raise ValidationError(str(e))
        details = quest_data.details.strip() if quest_data.details else None
        return QuestCreate(
            title=quest_data.title.strip(),
            category=category,
            date=quest_data.date,
            start_time=start,
            end_time=end,
            details=details or None,
            location=quest_data.location.strip(),
        )

    def create_quest(self, quest_data: QuestCreate, user_id: str) -> QuestResponse:
        """Create a quest. The location is geocoded first; nothing is stored if that fails."""
        try:
            quest = self.validate_quest(quest_data)
            if self.geocoder is None:
                raise HTTPException(status_code=500, detail="Geocoding is not configured")
            coordinates = self.geocoder.geocode(quest.location)

            result = self.supabase.table("quests").insert({
                "user_id": user_id,
                "title": quest.title,
                "category": quest.category,
                "date": quest.date.isoformat(),
                "start_time": quest.start_time,
                "end_time": quest.end_time,
                "details": quest.details,
                "location": quest.location,
                "latitude": coordinates.lat,
                "longitude": coordinates.lng,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create quest")

            created = QuestResponse(**result.data[0])
            logger.info(f"Quest {created.id} created by {user_id} at ({created.latitude}, {created.longitude})")
            self._publish("quest_created", created.id)
            return created
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_quest(self, quest_id: str) -> QuestResponse:
        """Get quest by ID"""
        try:
            result = self.supabase.table("quests")\
                .select("*")\
                .eq("id", quest_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise NotFoundError("Quest not found")

            return QuestResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_quests(self) -> List[QuestResponse]:
        """All stored quests, soonest first"""
        try:
            result = self.supabase.table("quests")\
                .select("*")\
                .order("date")\
                .order("start_time")\
                .execute()
            return [QuestResponse(**quest) for quest in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_active_quests(self, now: Optional[datetime] = None) -> List[QuestResponse]:
        """Quests whose end instant (next day for overnight quests) is still after now."""
        return [quest for quest in self.list_quests() if schedule.is_active(quest, now)]

    def delete_quest(self, quest_id: str, requester_id: str) -> bool:
        """End a quest. Only the owner may delete it; participants, messages and receipts go with it."""
        try:
            quest = self.get_quest(quest_id)
            if quest.user_id != requester_id:
                raise AuthorizationError("Only the quest owner can end this quest")

            messages = self.supabase.table("quest_messages")\
                .select("id")\
                .eq("quest_id", quest_id)\
                .execute()
            message_ids = [m["id"] for m in (messages.data or [])]
            if message_ids:
                self.supabase.table("quest_message_reads")\
                    .delete()\
                    .in_("message_id", message_ids)\
                    .execute()

            self.supabase.table("quest_messages")\
                .delete()\
                .eq("quest_id", quest_id)\
                .execute()

            self.supabase.table("quest_participants")\
                .delete()\
                .eq("quest_id", quest_id)\
                .execute()

            result = self.supabase.table("quests")\
                .delete()\
                .eq("id", quest_id)\
                .eq("user_id", requester_id)\
                .execute()

            deleted = len(result.data or []) > 0
            if deleted:
                logger.info(f"Quest {quest_id} ended by owner {requester_id}")
                self._publish("quest_deleted", quest_id)
                if self.hub is not None:
                    self.hub.close_channel(messages_channel(quest_id))
                    self.hub.close_channel(reads_channel(quest_id))
            return deleted
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
