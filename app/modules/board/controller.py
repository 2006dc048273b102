"""
Quest board controller.

One instance per connected user session. It owns the view state, the
filters, the map camera and the client's read watermarks, and sequences the
quest, participant and message services behind them. Push events arrive via
handle_event(); the session decides how they are delivered (directly, or
queued onto its event loop).
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import logging

from supabase import Client

from app.core.exceptions import NotFoundError, ValidationError
from app.core.realtime import BOARD_CHANNEL, RealtimeHub, Subscription, messages_channel, reads_channel
from app.modules.board.filters import FilterState, cleared
from app.modules.board.schemas import BoardSnapshot, OpenQuest
from app.modules.board.unread import WatermarkStore, unread_count
from app.modules.board.view_state import (
    Creating, Idle, ViewState, ViewingChat, ViewingDetail, describe, open_quest_id
)
from app.modules.geocoding.service import AutocompleteSession, GeocodingService
from app.modules.map.camera import MapCamera
from app.modules.map.events import MarkerAction, MarkerActionDispatcher
from app.modules.map.schemas import ACTION_FOR_RELATIONSHIP
from app.modules.map.service import MapRenderer
from app.modules.messages.schemas import MessageResponse
from app.modules.messages.service import MessageService
from app.modules.participants.schemas import MembershipResponse
from app.modules.participants.service import ParticipantService
from app.modules.profiles.service import ProfileService
from app.modules.quests.schemas import QuestCreate, QuestResponse
from app.modules.quests.service import QuestService

logger = logging.getLogger(__name__)

Emit = Callable[[str, Dict[str, Any]], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestBoardController:
    def __init__(
        self,
        supabase: Client,
        user_id: str,
        geocoder: GeocodingService,
        hub: RealtimeHub,
        watermarks: Optional[WatermarkStore] = None,
        renderer: Optional[MapRenderer] = None,
        camera: Optional[MapCamera] = None,
        emit: Optional[Emit] = None,
        deliver: Optional[Callable[[Dict[str, Any]], None]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.user_id = user_id
        self.hub = hub
        self.quests = QuestService(supabase, geocoder, hub)
        self.participants = ParticipantService(supabase, hub)
        self.messages = MessageService(supabase, hub)
        self.profiles = ProfileService(supabase)
        self.autocomplete = AutocompleteSession(geocoder)
        self.watermarks = watermarks or WatermarkStore()
        self.renderer = renderer or MapRenderer()
        self.camera = camera or MapCamera()
        self.emit: Emit = emit or (lambda kind, payload: None)
        self.deliver = deliver or self.handle_event
        self.clock = clock

        self.state: ViewState = Idle()
        self.filters: FilterState = cleared()
        self._chat_subscriptions: List[Subscription] = []
        self._board_subscription: Optional[Subscription] = None

        self.actions: MarkerActionDispatcher = MarkerActionDispatcher()
        self.actions.on("join", self.join)
        self.actions.on("leave", self.leave)
        self.actions.on("end", self.end_quest)
        self.actions.on("open", self.select_quest)

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> None:
        if self._board_subscription is None:
            self._board_subscription = self.hub.subscribe(BOARD_CHANNEL, self.deliver)

    def stop(self) -> None:
        self._close_chat()
        if self._board_subscription is not None:
            self._board_subscription.unsubscribe()
            self._board_subscription = None

    @property
    def chat_subscription_count(self) -> int:
        return len(self._chat_subscriptions)

    # -- view state --------------------------------------------------------

    def _set_state(self, state: ViewState) -> None:
        if state != self.state:
            logger.debug(f"Board {self.user_id}: {self.state.name} -> {state.name}")
        self.state = state

    def _close_chat(self) -> None:
        for subscription in self._chat_subscriptions:
            subscription.unsubscribe()
        self._chat_subscriptions = []

    def _advance_watermark(self, quest_id: str) -> None:
        at = self.watermarks.set(quest_id, self.clock())
        self.emit("watermark", {"quest_id": quest_id, "at": at.isoformat()})

    def _enter_chat(self, quest_id: str) -> None:
        if self.state != ViewingChat(quest_id) or not self._chat_subscriptions:
            self._close_chat()
            self._chat_subscriptions = [
                self.hub.subscribe(messages_channel(quest_id), self.deliver),
                self.hub.subscribe(reads_channel(quest_id), self.deliver),
            ]
        self._set_state(ViewingChat(quest_id))
        self.messages.mark_all_read(quest_id, self.user_id)
        self._advance_watermark(quest_id)

    def _relationship(self, quest: QuestResponse) -> str:
        return self.participants.relationship(quest, self.user_id)

    def open_create(self) -> ViewState:
        self._close_chat()
        self._set_state(Creating())
        return self.state

    def cancel_create(self) -> ViewState:
        if isinstance(self.state, Creating):
            self._set_state(Idle())
        return self.state

    def close(self) -> ViewState:
        self._close_chat()
        self._set_state(Idle())
        return self.state

    def select_quest(self, quest_id: str) -> ViewState:
        """Open a quest: chat for members, detail (Join only) for everyone else."""
        quest = self.quests.get_quest(quest_id)
        if self._relationship(quest) == "none":
            self._close_chat()
            self._set_state(ViewingDetail(quest_id))
        else:
            self._enter_chat(quest_id)
        return self.state

    def refresh(self) -> ViewState:
        """Re-evaluate the open quest after any membership change, ours or another session's."""
        quest_id = open_quest_id(self.state)
        if quest_id is None:
            return self.state
        try:
            quest = self.quests.get_quest(quest_id)
        except NotFoundError:
            logger.info(f"Open quest {quest_id} no longer exists")
            self.watermarks.forget(quest_id)
            return self.close()
        relationship = self._relationship(quest)
        if isinstance(self.state, ViewingDetail) and relationship != "none":
            self._enter_chat(quest_id)
        elif isinstance(self.state, ViewingChat) and relationship == "none":
            self._close_chat()
            self._set_state(ViewingDetail(quest_id))
        return self.state

    # -- quest actions -----------------------------------------------------

    def create_quest(self, quest_data: QuestCreate) -> QuestResponse:
        """Create from the create form. On failure the form stays open."""
        quest = self.quests.create_quest(quest_data, self.user_id)
        self._set_state(Idle())
        self.camera.focus(quest.latitude, quest.longitude)
        return quest

    def join(self, quest_id: str) -> MembershipResponse:
        membership = self.participants.join(quest_id, self.user_id)
        if open_quest_id(self.state) == quest_id:
            self.refresh()
        return membership

    def leave(self, quest_id: str) -> MembershipResponse:
        membership = self.participants.leave(quest_id, self.user_id)
        if open_quest_id(self.state) == quest_id:
            self.refresh()
        return membership

    def end_quest(self, quest_id: str) -> bool:
        deleted = self.quests.delete_quest(quest_id, self.user_id)
        self.watermarks.forget(quest_id)
        if open_quest_id(self.state) == quest_id:
            self.close()
        return deleted

    def handle_marker_action(self, quest_id: str, action: str):
        return self.actions.dispatch(MarkerAction(quest_id=quest_id, action=action))

    # -- filters -----------------------------------------------------------

    def set_filters(self, filters: FilterState) -> FilterState:
        self.filters = filters
        return self.filters

    def clear_filters(self) -> FilterState:
        self.filters = cleared()
        return self.filters

    # -- chat --------------------------------------------------------------

    def send_message(self, content: Optional[str], quest_id: Optional[str] = None) -> MessageResponse:
        quest_id = quest_id or open_quest_id(self.state)
        if quest_id is None:
            raise ValidationError("Open a quest chat first")
        return self.messages.send_message(quest_id, self.user_id, content)

    def mark_seen(self) -> int:
        """Mark everything in the open chat as read and move its watermark to now."""
        if not isinstance(self.state, ViewingChat):
            return 0
        marked = self.messages.mark_all_read(self.state.quest_id, self.user_id)
        self._advance_watermark(self.state.quest_id)
        return marked

    async def suggest_locations(self, text: str):
        return await self.autocomplete.suggest(text)

    def unread_counts(self, quests: List[QuestResponse], members_by_quest: Dict[str, List[str]]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for quest in quests:
            if self.user_id not in members_by_quest.get(quest.id, [quest.user_id]):
                continue
            if self.state == ViewingChat(quest.id):
                counts[quest.id] = 0
                continue
            history = self.messages.list_messages(quest.id, self.user_id)
            counts[quest.id] = unread_count(history, self.user_id, self.watermarks.get(quest.id))
        return counts

    # -- push events -------------------------------------------------------

    def _push_unread(self, quest_id: str, sender_id: Optional[str]) -> None:
        """Push the new counter for a closed chat when someone else posts in it."""
        if sender_id == self.user_id or self.state == ViewingChat(quest_id):
            return
        try:
            if not self.participants.is_member(quest_id, self.user_id):
                return
        except NotFoundError:
            return
        history = self.messages.list_messages(quest_id, self.user_id)
        count = unread_count(history, self.user_id, self.watermarks.get(quest_id))
        self.emit("unread", {"quest_id": quest_id, "count": count})

    def handle_event(self, event: Dict[str, Any]) -> None:
        kind = event.get("type")
        if kind == "message":
            message = event["message"]
            if self.state == ViewingChat(message["quest_id"]) and message["user_id"] != self.user_id:
                self.messages.mark_read(message["id"], self.user_id)
                self._advance_watermark(message["quest_id"])
            self.emit("message", message)
        elif kind == "read":
            self.emit("read", event["receipt"])
        elif kind == "quest_message":
            self._push_unread(event["quest_id"], event.get("user_id"))
        elif kind in ("quest_created", "quest_deleted", "membership_changed"):
            self.refresh()
            self.emit("board", {"event": event})
        else:
            logger.debug(f"Ignoring board event {kind}")

    # -- rendering ---------------------------------------------------------

    def _open_quest(self) -> Optional[OpenQuest]:
        quest_id = open_quest_id(self.state)
        if quest_id is None:
            return None
        quest = self.quests.get_quest(quest_id)
        participants = self.participants.list_participants(quest_id, quest)
        relationship = self.participants.relationship(
            quest, self.user_id, [p.user_id for p in participants.participants]
        )
        open_quest = OpenQuest(
            quest=quest,
            participants=participants,
            relationship=relationship,
            action=ACTION_FOR_RELATIONSHIP[relationship],
        )
        if isinstance(self.state, ViewingChat):
            open_quest.messages = self.messages.list_messages(quest_id, self.user_id)
            open_quest.statuses = self.messages.message_status(quest_id, self.user_id)
        return open_quest

    def render(self, now: Optional[datetime] = None) -> BoardSnapshot:
        """Full rebuild of what the board shows: markers for active, filtered quests plus the open quest."""
        active = self.quests.list_active_quests(now)
        members_by_quest = self.participants.members_by_quest(active)
        profile_ids = {uid for ids in members_by_quest.values() for uid in ids}
        profiles = self.profiles.get_profiles(profile_ids)

        visible = self.filters.apply(active)
        view = self.renderer.render(visible, members_by_quest, profiles, self.user_id, self.camera.snapshot())

        try:
            open_quest = self._open_quest()
        except NotFoundError:
            self.close()
            open_quest = None

        described = describe(self.state)
        return BoardSnapshot(
            mode=described["mode"],
            quest_id=described["quest_id"],
            filters=self.filters.to_dict(),
            map=view,
            unread=self.unread_counts(active, members_by_quest),
            open_quest=open_quest,
        )
