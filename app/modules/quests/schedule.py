"""
Quest schedule rules.

A quest runs on its date from start_time to end_time, in the configured quest
timezone. When end_time is at or before start_time the quest runs past
midnight and ends on the following day.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.config import settings


def parse_time(value: str) -> time:
    """Parse 'HH:MM' or 'HH:MM:SS' as stored by Postgres."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def quest_zone(tz_name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(tz_name or settings.quest_timezone)


def is_overnight(start_time: str, end_time: str) -> bool:
    return parse_time(end_time) <= parse_time(start_time)


def start_instant(quest_date: date, start_time: str, tz: Optional[ZoneInfo] = None) -> datetime:
    return datetime.combine(quest_date, parse_time(start_time), tzinfo=tz or quest_zone())


def end_instant(quest_date: date, start_time: str, end_time: str, tz: Optional[ZoneInfo] = None) -> datetime:
    end = datetime.combine(quest_date, parse_time(end_time), tzinfo=tz or quest_zone())
    if is_overnight(start_time, end_time):
        end += timedelta(days=1)
    return end


def _aware(now: Optional[datetime], tz: ZoneInfo) -> datetime:
    if now is None:
        return datetime.now(timezone.utc).astimezone(tz)
    if now.tzinfo is None:
        # Naive datetimes are wall-clock times in the quest zone
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def is_active(quest, now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> bool:
    """True while now is strictly before the quest's end instant."""
    tz = tz or quest_zone()
    return _aware(now, tz) < end_instant(quest.date, quest.start_time, quest.end_time, tz)
