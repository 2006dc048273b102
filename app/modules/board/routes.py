from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from app.modules.board.controller import QuestBoardController
from app.modules.board.filters import FilterState
from app.modules.board.schemas import BoardCommand, BoardSnapshot
from app.modules.board.unread import WatermarkStore
from app.modules.geocoding.routes import get_geocoding_service
from app.modules.geocoding.service import GeocodingService
from app.modules.map.camera import MapCamera
from app.modules.quests.schemas import QuestCreate
from app.core.dependencies import authenticate_websocket, get_current_user_id, get_hub
from app.core.realtime import RealtimeHub
from app.core.websocket import QueueBridge, cancel_task
from supabase import Client
from typing import Dict, List, Optional
import datetime as dt
import asyncio
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/board", tags=["board"])

STATE_EVENTS = ("quest_created", "quest_deleted", "membership_changed")


@router.get("", response_model=BoardSnapshot)
async def get_board(
    categories: List[str] = Query(default=[]),
    date: Optional[dt.date] = None,
    time_from: Optional[str] = None,
    time_to: Optional[str] = None,
    zoom: Optional[int] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    geocoder: GeocodingService = Depends(get_geocoding_service),
    hub: RealtimeHub = Depends(get_hub)
):
    """Markers and clusters for active quests matching the filters, as seen by the current user"""
    controller = QuestBoardController(
        supabase,
        user_data["id"],
        geocoder,
        hub,
        camera=MapCamera(lat=lat, lng=lng, zoom=zoom),
    )
    controller.set_filters(FilterState.build(categories, date, time_from, time_to))
    return controller.render()


class BoardSession:
    """Runs one board WebSocket: client commands in, state/message/read/unread/watermark frames out."""

    def __init__(self, websocket: WebSocket, controller: QuestBoardController, bridge: QueueBridge):
        self.websocket = websocket
        self.controller = controller
        self.bridge = bridge
        self._suggestions: Optional[asyncio.Task] = None

    async def send_state(self) -> None:
        snapshot = self.controller.render()
        await self.websocket.send_json({"type": "state", "state": snapshot.model_dump(mode="json")})

    async def send_error(self, status_code: int, detail) -> None:
        await self.websocket.send_json({"type": "error", "status": status_code, "detail": detail})

    async def pump(self) -> None:
        """Deliver hub events to the controller and queued frames to the client, in arrival order."""
        while True:
            kind, payload = await self.bridge.get()
            if kind == "frame":
                await self.websocket.send_json(payload)
                continue
            try:
                self.controller.handle_event(payload)
                if payload.get("type") in STATE_EVENTS:
                    await self.send_state()
            except HTTPException as e:
                await self.send_error(e.status_code, e.detail)

    async def _suggest(self, text: str) -> None:
        suggestions = await self.controller.suggest_locations(text)
        if suggestions is None:
            return
        self.bridge.frame({
            "type": "suggestions",
            "query": text,
            "suggestions": [s.model_dump() for s in suggestions],
        })

    async def handle(self, command: BoardCommand) -> bool:
        """Apply one command. Returns whether a fresh state frame should follow."""
        c = self.controller
        action = command.action
        if action == "state":
            pass
        elif action == "open_create":
            c.open_create()
        elif action == "cancel_create":
            c.cancel_create()
        elif action == "create":
            quest = c.create_quest(command.quest or QuestCreate())
            await self.websocket.send_json({"type": "created", "quest": quest.model_dump(mode="json")})
        elif action == "select":
            c.select_quest(command.quest_id or "")
        elif action == "close":
            c.close()
        elif action == "join":
            c.join(command.quest_id or "")
        elif action == "leave":
            c.leave(command.quest_id or "")
        elif action == "end":
            c.end_quest(command.quest_id or "")
        elif action == "marker_action":
            c.handle_marker_action(command.quest_id or "", command.text or "")
        elif action == "set_filters":
            params = command.filters
            if params is None:
                c.clear_filters()
            else:
                c.set_filters(FilterState.build(params.categories, params.date, params.time_from, params.time_to))
        elif action == "clear_filters":
            c.clear_filters()
        elif action == "zoom":
            c.camera.set_zoom(command.zoom if command.zoom is not None else c.camera.zoom)
        elif action == "send":
            c.send_message(command.content, command.quest_id)
            return False
        elif action == "mark_seen":
            c.mark_seen()
            return False
        elif action == "sync_watermarks":
            c.watermarks.merge(command.watermarks or {})
        elif action == "autocomplete":
            self._suggestions = asyncio.create_task(self._suggest(command.text or ""))
            return False
        else:
            await self.send_error(400, f"Unknown action: {action}")
            return False
        return True

    async def run(self) -> None:
        self.controller.start()
        pump = asyncio.create_task(self.pump())
        try:
            await self.send_state()
            while True:
                try:
                    frame = await self.websocket.receive_json()
                except ValueError:
                    await self.send_error(400, "Frames must be valid JSON")
                    continue
                if not isinstance(frame, dict):
                    await self.send_error(422, "Commands must be JSON objects")
                    continue
                try:
                    command = BoardCommand(**frame)
                except PydanticValidationError as e:
                    await self.send_error(422, e.errors(include_url=False))
                    continue
                try:
                    if await self.handle(command):
                        await self.send_state()
                except HTTPException as e:
                    await self.send_error(e.status_code, e.detail)
                except ValueError as e:
                    await self.send_error(400, str(e))
        finally:
            self.controller.stop()
            await cancel_task(pump)
            if self._suggestions is not None and not self._suggestions.done():
                await cancel_task(self._suggestions)


@router.websocket("/ws")
async def board_socket(
    websocket: WebSocket,
    supabase: Client = Depends(get_supabase),
    geocoder: GeocodingService = Depends(get_geocoding_service),
    hub: RealtimeHub = Depends(get_hub)
):
    """Interactive quest board session for one user"""
    await websocket.accept()
    user_data = await authenticate_websocket(websocket, AuthService(supabase))
    if user_data is None:
        return
    bridge = QueueBridge()
    controller = QuestBoardController(
        supabase,
        user_data["id"],
        geocoder,
        hub,
        watermarks=WatermarkStore(),
        emit=lambda kind, payload: bridge.frame({"type": kind, **payload}),
        deliver=bridge.event,
    )
    session = BoardSession(websocket, controller, bridge)
    logger.info(f"Board session opened for {user_data['id']}")
    try:
        await session.run()
    except WebSocketDisconnect:
        logger.info(f"Board session closed for {user_data['id']}")
