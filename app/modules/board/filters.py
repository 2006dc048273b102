from dataclasses import dataclass, field
import datetime as dt
from typing import FrozenSet, Iterable, List, Optional

from app.core.exceptions import ValidationError
from app.modules.quests import schedule
from app.modules.quests.schemas import QUEST_CATEGORIES, QuestResponse


@dataclass(frozen=True)
class FilterState:
    """
    Marker filters. An empty category set means every category; date and
    the time bounds are ignored when unset. A quest passes the time range
    when its start time falls within [time_from, time_to].
    """
    categories: FrozenSet[str] = field(default_factory=frozenset)
    date: Optional[dt.date] = None
    time_from: Optional[str] = None
    time_to: Optional[str] = None

    @classmethod
    def build(
        cls,
        categories: Optional[Iterable[str]] = None,
        date: Optional[dt.date] = None,
        time_from: Optional[str] = None,
        time_to: Optional[str] = None,
    ) -> "FilterState":
        cats = frozenset(c.strip().lower() for c in (categories or []) if c and c.strip())
        unknown = cats - set(QUEST_CATEGORIES)
        if unknown:
            raise ValidationError(f"Unknown categories: {', '.join(sorted(unknown))}")
        try:
            time_from = schedule.format_time(schedule.parse_time(time_from)) if time_from else None
            time_to = schedule.format_time(schedule.parse_time(time_to)) if time_to else None
        except ValueError as e:
            raise ValidationError(str(e))
        return cls(categories=cats, date=date, time_from=time_from, time_to=time_to)

    @property
    def is_empty(self) -> bool:
        return not self.categories and self.date is None and not self.time_from and not self.time_to

    def matches(self, quest: QuestResponse) -> bool:
        if self.categories and quest.category not in self.categories:
            return False
        if self.date is not None and quest.date != self.date:
            return False
        start = schedule.parse_time(quest.start_time)
        if self.time_from and start < schedule.parse_time(self.time_from):
            return False
        if self.time_to and start > schedule.parse_time(self.time_to):
            return False
        return True

    def apply(self, quests: List[QuestResponse]) -> List[QuestResponse]:
        return [q for q in quests if self.matches(q)]

    def to_dict(self) -> dict:
        return {
            "categories": sorted(self.categories),
            "date": self.date.isoformat() if self.date else None,
            "time_from": self.time_from,
            "time_to": self.time_to,
        }


def cleared() -> FilterState:
    return FilterState()
