"""
Board view state.

Exactly one of these is current at a time; filters live beside it in
FilterState and do not depend on it.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Idle:
    name = "idle"


@dataclass(frozen=True)
class Creating:
    name = "creating"


@dataclass(frozen=True)
class ViewingDetail:
    """A quest the current user is not a member of. Offers Join."""
    quest_id: str
    name = "viewing_detail"


@dataclass(frozen=True)
class ViewingChat:
    """A quest the current user owns or has joined. Detail panel plus chat."""
    quest_id: str
    name = "viewing_chat"


ViewState = Union[Idle, Creating, ViewingDetail, ViewingChat]


def open_quest_id(state: ViewState) -> Optional[str]:
    if isinstance(state, (ViewingDetail, ViewingChat)):
        return state.quest_id
    return None


def describe(state: ViewState) -> dict:
    return {"mode": state.name, "quest_id": open_quest_id(state)}
