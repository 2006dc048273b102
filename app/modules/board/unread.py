"""
Unread chat counters.

The "last read" watermark per quest belongs to the client: it is sent in
when a board session starts and every change is pushed back so the client
can persist it. Nothing here is shared between devices.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, Optional


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class WatermarkStore:
    def __init__(self, initial: Optional[Dict[str, datetime]] = None):
        self._marks: Dict[str, datetime] = {}
        for quest_id, at in (initial or {}).items():
            self.set(quest_id, at)

    def get(self, quest_id: str) -> Optional[datetime]:
        return self._marks.get(quest_id)

    def set(self, quest_id: str, at: datetime) -> datetime:
        """Store a watermark; it never moves backwards."""
        at = _utc(at)
        current = self._marks.get(quest_id)
        if current is None or at > current:
            self._marks[quest_id] = at
        return self._marks[quest_id]

    def merge(self, marks: Dict[str, datetime]) -> None:
        for quest_id, at in marks.items():
            self.set(quest_id, at)

    def forget(self, quest_id: str) -> None:
        self._marks.pop(quest_id, None)

    def to_dict(self) -> Dict[str, str]:
        return {quest_id: at.isoformat() for quest_id, at in self._marks.items()}


def unread_count(messages: Iterable, user_id: str, watermark: Optional[datetime]) -> int:
    """Messages from other users created after the watermark (all of them when there is none)."""
    count = 0
    for message in messages:
        if message.user_id == user_id:
            continue
        if watermark is None or _utc(message.created_at) > _utc(watermark):
            count += 1
    return count
