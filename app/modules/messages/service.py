from supabase import Client
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.realtime import BOARD_CHANNEL, RealtimeHub, messages_channel, reads_channel
from app.modules.messages.schemas import MessageResponse, ReadReceiptResponse, MessageStatus
from app.modules.participants.service import ParticipantService
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, supabase: Client, hub: Optional[RealtimeHub] = None):
        self.supabase = supabase
        self.hub = hub
        self.participants = ParticipantService(supabase)

    def require_member(self, quest_id: str, user_id: str) -> None:
        if not self.participants.is_member(quest_id, user_id):
            raise AuthorizationError("Join this quest to use its chat")

    def send_message(self, quest_id: str, user_id: str, content: Optional[str]) -> MessageResponse:
        """Post to a quest chat. The sender's own message is marked read for them straight away."""
        try:
            body = (content or "").strip()
            if not body:
                raise ValidationError("Message cannot be empty")
            self.require_member(quest_id, user_id)

            result = self.supabase.table("quest_messages").insert({
                "quest_id": quest_id,
                "user_id": user_id,
                "content": body,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to send message")

            message = MessageResponse(**result.data[0])
            if self.hub is not None:
                self.hub.publish(messages_channel(quest_id), {
                    "type": "message",
                    "message": message.model_dump(mode="json"),
                })
                self.hub.publish(BOARD_CHANNEL, {
                    "type": "quest_message",
                    "quest_id": quest_id,
                    "user_id": user_id,
                })
            self._upsert_reads(quest_id, [message.id], user_id)
            return message
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_message(self, message_id: str) -> MessageResponse:
        try:
            result = self.supabase.table("quest_messages")\
                .select("*")\
                .eq("id", message_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise NotFoundError("Message not found")

            return MessageResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_messages(self, quest_id: str, user_id: str) -> List[MessageResponse]:
        """Full chat history, oldest first (members only)"""
        try:
            self.require_member(quest_id, user_id)
            result = self.supabase.table("quest_messages")\
                .select("*")\
                .eq("quest_id", quest_id)\
                .order("created_at")\
                .execute()
            return [MessageResponse(**m) for m in (result.data or [])]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _upsert_reads(self, quest_id: str, message_ids: List[str], user_id: str) -> List[ReadReceiptResponse]:
        """Insert receipts, ignoring ones that already exist. Only new receipts are returned and pushed."""
        if not message_ids:
            return []
        result = self.supabase.table("quest_message_reads").upsert(
            [{"message_id": mid, "quest_id": quest_id, "user_id": user_id} for mid in message_ids],
            on_conflict="message_id,user_id",
            ignore_duplicates=True,
        ).execute()
        receipts = [ReadReceiptResponse(**r) for r in (result.data or [])]
        if self.hub is not None:
            for receipt in receipts:
                self.hub.publish(reads_channel(quest_id), {
                    "type": "read",
                    "receipt": receipt.model_dump(mode="json"),
                })
        return receipts

    def mark_read(self, message_id: str, user_id: str) -> ReadReceiptResponse:
        """Record that user_id has seen message_id. Safe to repeat."""
        try:
            message = self.get_message(message_id)
            self.require_member(message.quest_id, user_id)
            created = self._upsert_reads(message.quest_id, [message_id], user_id)
            if created:
                return created[0]
            return ReadReceiptResponse(message_id=message_id, quest_id=message.quest_id, user_id=user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_reads(self, quest_id: str) -> List[ReadReceiptResponse]:
        try:
            result = self.supabase.table("quest_message_reads")\
                .select("*")\
                .eq("quest_id", quest_id)\
                .execute()
            return [ReadReceiptResponse(**r) for r in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_all_read(self, quest_id: str, user_id: str) -> int:
        """Mark every message from other members that user_id has not read yet. Returns how many were new."""
        try:
            messages = self.list_messages(quest_id, user_id)
            already_read = {r.message_id for r in self.list_reads(quest_id) if r.user_id == user_id}
            outstanding = [m.id for m in messages if m.user_id != user_id and m.id not in already_read]
            return len(self._upsert_reads(quest_id, outstanding, user_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def message_status(self, quest_id: str, user_id: str) -> List[MessageStatus]:
        """Who, apart from the sender, has seen each message"""
        try:
            messages = self.list_messages(quest_id, user_id)
            readers = {}
            for receipt in self.list_reads(quest_id):
                readers.setdefault(receipt.message_id, []).append(receipt.user_id)
            statuses = []
            for message in messages:
                seen_by = [r for r in readers.get(message.id, []) if r != message.user_id]
                statuses.append(MessageStatus(
                    message_id=message.id,
                    sender_id=message.user_id,
                    seen_by=seen_by,
                    seen_by_others=bool(seen_by),
                ))
            return statuses
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
