from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from app.modules.messages.schemas import (
    MessageCreate, MessageResponse, ReadReceiptResponse, MessageStatus, MarkAllReadResponse
)
from app.modules.messages.service import MessageService
from app.core.dependencies import authenticate_websocket, get_current_user_id, get_hub
from app.core.realtime import BOARD_CHANNEL, RealtimeHub, Subscription, messages_channel, reads_channel
from app.core.websocket import QueueBridge, cancel_task
from supabase import Client
from typing import List, Dict
import asyncio
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])


def get_message_service(
    supabase: Client = Depends(get_supabase),
    hub: RealtimeHub = Depends(get_hub)
) -> MessageService:
    return MessageService(supabase, hub)


@router.get("/quests/{quest_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service)
):
    """Chat history, oldest first (members only)"""
    return service.list_messages(quest_id, user_data["id"])


@router.post("/quests/{quest_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    quest_id: str,
    message_data: MessageCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service)
):
    """Send a chat message (members only)"""
    return service.send_message(quest_id, user_data["id"], message_data.content)


@router.get("/quests/{quest_id}/messages/status", response_model=List[MessageStatus])
async def message_status(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service)
):
    """Seen-by-others status for every message"""
    return service.message_status(quest_id, user_data["id"])


@router.post("/quests/{quest_id}/messages/read", response_model=MarkAllReadResponse)
async def mark_all_read(
    quest_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service)
):
    """Mark every message in the chat as read by the current user"""
    marked = service.mark_all_read(quest_id, user_data["id"])
    return MarkAllReadResponse(quest_id=quest_id, marked=marked)


@router.post("/messages/{message_id}/read", response_model=ReadReceiptResponse)
async def mark_read(
    message_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service)
):
    """Mark one message as read (idempotent)"""
    return service.mark_read(message_id, user_data["id"])


class ChatSession:
    """Runs one chat WebSocket for a member. Ends with 1008 once the user stops being a member."""

    def __init__(self, websocket: WebSocket, service: MessageService, hub: RealtimeHub, quest_id: str, user_id: str):
        self.websocket = websocket
        self.service = service
        self.hub = hub
        self.quest_id = quest_id
        self.user_id = user_id
        self.bridge = QueueBridge()
        self.subscriptions: List[Subscription] = []
        self.revoked = False

    async def send_error(self, status_code: int, detail) -> None:
        await self.websocket.send_json({"type": "error", "status": status_code, "detail": detail})

    def subscribe(self) -> None:
        self.subscriptions = [
            self.hub.subscribe(messages_channel(self.quest_id), self.bridge.event),
            self.hub.subscribe(reads_channel(self.quest_id), self.bridge.event),
            self.hub.subscribe(BOARD_CHANNEL, self.bridge.event),
        ]

    def unsubscribe(self) -> None:
        for subscription in self.subscriptions:
            subscription.unsubscribe()

    def _touches_membership(self, event: Dict) -> bool:
        if event.get("quest_id") != self.quest_id:
            return False
        if event.get("type") == "quest_deleted":
            return True
        return event.get("type") == "membership_changed" and event.get("user_id") == self.user_id

    async def revoke(self, status_code: int, detail) -> None:
        self.revoked = True
        self.unsubscribe()
        logger.info(f"User {self.user_id} lost access to chat for quest {self.quest_id}")
        await self.send_error(status_code, detail)
        await self.websocket.close(code=status.WS_1008_POLICY_VIOLATION)

    async def pump(self) -> None:
        """Forward chat events in arrival order; membership is re-checked before anything queued after a change."""
        while True:
            _, payload = await self.bridge.get()
            kind = payload.get("type")
            if kind in ("message", "read"):
                await self.websocket.send_json(payload)
            elif self._touches_membership(payload):
                try:
                    self.service.require_member(self.quest_id, self.user_id)
                except HTTPException as e:
                    await self.revoke(e.status_code, e.detail)
                    return

    async def handle(self, frame) -> None:
        if not isinstance(frame, dict):
            await self.send_error(400, "Frames must be JSON objects")
            return
        action = frame.get("action")
        try:
            if action == "send":
                self.service.send_message(self.quest_id, self.user_id, frame.get("content"))
            elif action == "read":
                self.service.mark_read(frame.get("message_id", ""), self.user_id)
            else:
                await self.send_error(400, f"Unknown action: {action}")
        except HTTPException as e:
            await self.send_error(e.status_code, e.detail)

    async def run(self) -> None:
        self.subscribe()
        pump = asyncio.create_task(self.pump())
        try:
            await self.websocket.send_json({"type": "subscribed", "quest_id": self.quest_id})
            while not self.revoked:
                try:
                    frame = await self.websocket.receive_json()
                except ValueError:
                    if self.revoked:
                        break
                    await self.send_error(400, "Frames must be valid JSON")
                    continue
                if self.revoked:
                    break
                await self.handle(frame)
        finally:
            self.unsubscribe()
            await cancel_task(pump)


@router.websocket("/quests/{quest_id}/chat")
async def quest_chat(
    websocket: WebSocket,
    quest_id: str,
    supabase: Client = Depends(get_supabase),
    hub: RealtimeHub = Depends(get_hub)
):
    """
    Live chat for one quest.

    Pushes {"type": "message"} for every new message and {"type": "read"} for
    every new read receipt. Accepts {"action": "send", "content": ...} and
    {"action": "read", "message_id": ...}. Leaving or ending the quest closes
    the socket with 1008; all subscriptions end with it.
    """
    await websocket.accept()
    user_data = await authenticate_websocket(websocket, AuthService(supabase))
    if user_data is None:
        return
    user_id = user_data["id"]
    service = MessageService(supabase, hub)
    try:
        service.require_member(quest_id, user_id)
    except HTTPException as e:
        await websocket.send_json({"type": "error", "status": e.status_code, "detail": e.detail})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    logger.info(f"User {user_id} opened chat for quest {quest_id}")
    try:
        await ChatSession(websocket, service, hub, quest_id, user_id).run()
    except WebSocketDisconnect:
        logger.info(f"User {user_id} closed chat for quest {quest_id}")
