"""
Tests for joining and leaving quests.
"""

import pytest
from fastapi import HTTPException

from app.core.realtime import BOARD_CHANNEL
from app.modules.participants.service import ParticipantService
from app.modules.quests.service import QuestService
from tests.conftest import auth, make_quest


@pytest.fixture
def quest(supabase, geocoder):
    return QuestService(supabase, geocoder).create_quest(make_quest(), "alice")


def participants_url(quest_id: str) -> str:
    return f"/api/v1/quests/{quest_id}/participants"


class TestJoinLeave:
    def test_join_then_leave(self, client, quest):
        joined = client.post(participants_url(quest.id), headers=auth("bob"))
        assert joined.status_code == 200
        body = joined.json()
        assert body["relationship"] == "participant"
        assert [p["user_id"] for p in body["participants"]["participants"]] == ["alice", "bob"]
        assert body["participants"]["count"] == 2

        left = client.delete(f"{participants_url(quest.id)}/me", headers=auth("bob"))
        assert left.status_code == 200
        assert left.json()["relationship"] == "none"
        assert [p["user_id"] for p in left.json()["participants"]["participants"]] == ["alice"]

    def test_join_is_idempotent(self, client, supabase, quest):
        client.post(participants_url(quest.id), headers=auth("bob"))
        second = client.post(participants_url(quest.id), headers=auth("bob"))
        assert second.status_code == 200
        assert second.json()["participants"]["count"] == 2
        assert len(supabase.rows("quest_participants")) == 1

    def test_owner_join_is_noop(self, client, supabase, quest):
        response = client.post(participants_url(quest.id), headers=auth("alice"))
        assert response.status_code == 200
        assert response.json()["relationship"] == "owner"
        assert supabase.rows("quest_participants") == []

    def test_owner_listed_once_even_with_stray_row(self, client, supabase, quest):
        supabase.table("quest_participants").insert({"quest_id": quest.id, "user_id": "alice"}).execute()
        client.post(participants_url(quest.id), headers=auth("bob"))
        listing = client.get(participants_url(quest.id), headers=auth("carol")).json()
        assert [p["user_id"] for p in listing["participants"]] == ["alice", "bob"]
        assert listing["participants"][0]["is_owner"] is True
        assert listing["owner_id"] == "alice"

    def test_owner_cannot_leave(self, client, quest):
        response = client.delete(f"{participants_url(quest.id)}/me", headers=auth("alice"))
        assert response.status_code == 400

    def test_leave_when_not_member_is_noop(self, client, quest, hub):
        events = []
        hub.subscribe(BOARD_CHANNEL, events.append)
        response = client.delete(f"{participants_url(quest.id)}/me", headers=auth("carol"))
        assert response.status_code == 200
        assert events == []

    def test_rejoin_after_leaving(self, client, quest):
        client.post(participants_url(quest.id), headers=auth("bob"))
        client.delete(f"{participants_url(quest.id)}/me", headers=auth("bob"))
        again = client.post(participants_url(quest.id), headers=auth("bob"))
        assert again.json()["relationship"] == "participant"

    def test_join_missing_quest(self, client):
        response = client.post(participants_url("missing"), headers=auth("bob"))
        assert response.status_code == 404


class TestParticipantService:
    def test_names_and_composition(self, supabase, quest):
        service = ParticipantService(supabase)
        service.join(quest.id, "bob")
        service.join(quest.id, "carol")
        listing = service.list_participants(quest.id)
        assert [p.display_name for p in listing.participants] == ["Alice", "Bob", "Carol"]
        assert listing.composition == {"male": 1, "female": 1, "other": 0, "unspecified": 1}

    def test_missing_profile_is_anonymous(self, supabase, quest):
        service = ParticipantService(supabase)
        service.join(quest.id, "ghost")
        names = [p.display_name for p in service.list_participants(quest.id).participants]
        assert names == ["Alice", "Anonymous"]

    def test_relationship(self, supabase, quest):
        service = ParticipantService(supabase)
        service.join(quest.id, "bob")
        assert service.relationship(quest, "alice") == "owner"
        assert service.relationship(quest, "bob") == "participant"
        assert service.relationship(quest, "carol") == "none"
        assert service.is_member(quest.id, "bob")
        assert not service.is_member(quest.id, "carol")

    def test_members_by_quest(self, supabase, geocoder, quest):
        other = QuestService(supabase, geocoder).create_quest(make_quest(title="Study"), "bob")
        service = ParticipantService(supabase)
        service.join(quest.id, "carol")
        service.join(other.id, "alice")
        assert service.members_by_quest([quest, other]) == {
            quest.id: ["alice", "carol"],
            other.id: ["bob", "alice"],
        }

    def test_membership_changes_are_published(self, supabase, hub, quest):
        events = []
        hub.subscribe(BOARD_CHANNEL, events.append)
        service = ParticipantService(supabase, hub)
        service.join(quest.id, "bob")
        service.leave(quest.id, "bob")
        assert events == [
            {"type": "membership_changed", "quest_id": quest.id, "user_id": "bob"},
            {"type": "membership_changed", "quest_id": quest.id, "user_id": "bob"},
        ]

    def test_repeat_join_publishes_once(self, supabase, hub, quest):
        events = []
        hub.subscribe(BOARD_CHANNEL, events.append)
        service = ParticipantService(supabase, hub)
        service.join(quest.id, "bob")
        service.join(quest.id, "bob")
        service.join(quest.id, "alice")
        assert events == [{"type": "membership_changed", "quest_id": quest.id, "user_id": "bob"}]

    def test_owner_leave_raises(self, supabase, quest):
        with pytest.raises(HTTPException) as exc:
            ParticipantService(supabase).leave(quest.id, "alice")
        assert exc.value.status_code == 400
