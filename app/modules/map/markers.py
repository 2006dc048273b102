from app.modules.map.schemas import ACTION_FOR_RELATIONSHIP, Marker, QuestCard
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import display_name, gender_composition
from app.modules.quests import schedule
from app.modules.quests.schemas import QuestResponse
from typing import Dict, List, Tuple


def relationship_for(quest: QuestResponse, members: List[str], user_id: str) -> str:
    if quest.user_id == user_id:
        return "owner"
    return "participant" if user_id in members else "none"


def marker_id(lat: float, lng: float) -> str:
    return f"{lat:.6f},{lng:.6f}"


def build_card(
    quest: QuestResponse,
    members: List[str],
    profiles: Dict[str, ProfileResponse],
    current_user_id: str,
) -> QuestCard:
    relationship = relationship_for(quest, members, current_user_id)
    return QuestCard(
        quest_id=quest.id,
        title=quest.title,
        category=quest.category,
        date=quest.date,
        start_time=quest.start_time,
        end_time=quest.end_time,
        overnight=schedule.is_overnight(quest.start_time, quest.end_time),
        details=quest.details,
        location=quest.location,
        participant_count=len(members),
        composition=gender_composition(profiles, members),
        creator_id=quest.user_id,
        creator_name=display_name(profiles, quest.user_id),
        relationship=relationship,
        action=ACTION_FOR_RELATIONSHIP[relationship],
    )


def build_markers(
    quests: List[QuestResponse],
    members_by_quest: Dict[str, List[str]],
    profiles: Dict[str, ProfileResponse],
    current_user_id: str,
) -> List[Marker]:
    """One marker per distinct (lat, lng); quests at the same spot share it, in input order."""
    grouped: Dict[Tuple[float, float], List[QuestCard]] = {}
    for quest in quests:
        members = members_by_quest.get(quest.id) or [quest.user_id]
        card = build_card(quest, members, profiles, current_user_id)
        grouped.setdefault((quest.latitude, quest.longitude), []).append(card)
    return [
        Marker(id=marker_id(lat, lng), lat=lat, lng=lng, quests=cards)
        for (lat, lng), cards in grouped.items()
    ]
