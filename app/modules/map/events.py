"""
Marker interaction dispatch.

Marker content carries (quest_id, action) pairs instead of calling global
functions; whoever owns the map registers one typed handler per action.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MARKER_ACTIONS = ("join", "leave", "end", "open")


@dataclass(frozen=True)
class MarkerAction:
    quest_id: str
    action: str


class MarkerActionDispatcher(Generic[T]):
    def __init__(self):
        self._handlers: Dict[str, Callable[[str], T]] = {}

    def on(self, action: str, handler: Callable[[str], T]) -> None:
        if action not in MARKER_ACTIONS:
            raise ValueError(f"Unknown marker action: {action}")
        self._handlers[action] = handler

    def dispatch(self, event: MarkerAction) -> T:
        handler = self._handlers.get(event.action)
        if handler is None:
            raise ValueError(f"No handler registered for marker action: {event.action}")
        logger.debug(f"Marker action {event.action} on quest {event.quest_id}")
        return handler(event.quest_id)
