"""
Tests for marker building, clustering, the camera and marker action dispatch.
"""

import datetime as dt

import pytest

from app.modules.map.camera import MapCamera
from app.modules.map.clustering import cluster_markers, project
from app.modules.map.events import MarkerAction, MarkerActionDispatcher
from app.modules.map.markers import build_markers, marker_id
from app.modules.map.schemas import Camera
from app.modules.map.service import MapRenderer
from app.modules.profiles.schemas import ProfileResponse
from app.modules.quests.schemas import QuestResponse
from tests.conftest import PLACES


def quest(quest_id, owner="alice", place="NTU", category="food", start="12:00", end="13:00"):
    lat, lng = PLACES[place]
    return QuestResponse(
        id=quest_id,
        user_id=owner,
        title=quest_id.title(),
        category=category,
        date=dt.date(2026, 3, 1),
        start_time=start,
        end_time=end,
        location=place,
        latitude=lat,
        longitude=lng,
    )


PROFILES = {
    "alice": ProfileResponse(id="alice", display_name="Alice", gender="female"),
    "bob": ProfileResponse(id="bob", display_name="Bob", gender="male"),
}


class TestBuildMarkers:
    def test_quests_at_same_spot_share_a_marker(self):
        quests = [quest("lunch"), quest("study", category="study"), quest("run", place="Marina Bay Sands")]
        markers = build_markers(quests, {}, PROFILES, "bob")
        assert len(markers) == 2
        assert [c.quest_id for c in markers[0].quests] == ["lunch", "study"]
        assert [c.quest_id for c in markers[1].quests] == ["run"]
        assert markers[0].id == marker_id(*PLACES["NTU"])

    def test_card_action_follows_relationship(self):
        quests = [quest("mine", owner="bob"), quest("joined"), quest("open", place="Marina Bay Sands")]
        members = {"mine": ["bob"], "joined": ["alice", "bob"], "open": ["alice"]}
        cards = {
            c.quest_id: c
            for m in build_markers(quests, members, PROFILES, "bob")
            for c in m.quests
        }
        assert (cards["mine"].relationship, cards["mine"].action) == ("owner", "end")
        assert (cards["joined"].relationship, cards["joined"].action) == ("participant", "leave")
        assert (cards["open"].relationship, cards["open"].action) == ("none", "join")

    def test_card_details(self):
        members = {"late": ["alice", "bob", "ghost"]}
        card = build_markers([quest("late", start="23:00", end="01:00")], members, PROFILES, "carol")[0].quests[0]
        assert card.participant_count == 3
        assert card.creator_name == "Alice"
        assert card.overnight is True
        assert card.composition == {"male": 1, "female": 1, "other": 0, "unspecified": 1}

    def test_owner_counts_when_no_membership_known(self):
        card = build_markers([quest("solo")], {}, {}, "bob")[0].quests[0]
        assert card.participant_count == 1
        assert card.creator_name == "Anonymous"


class TestClustering:
    def markers(self):
        quests = [quest("a"), quest("b", place="North Spine"), quest("c", place="Marina Bay Sands")]
        return build_markers(quests, {}, PROFILES, "bob")

    def test_projection_is_monotonic(self):
        west_x, _ = project(1.35, 103.6, 12)
        east_x, _ = project(1.35, 103.9, 12)
        _, north_y = project(1.40, 103.8, 12)
        _, south_y = project(1.30, 103.8, 12)
        assert west_x < east_x
        assert north_y < south_y

    def test_nearby_markers_cluster_when_zoomed_out(self):
        singles, clusters = cluster_markers(self.markers(), zoom=12)
        assert [m.location for s in singles for m in s.quests] == ["Marina Bay Sands"]
        assert len(clusters) == 1
        cluster = clusters[0]
        assert cluster.quest_count == 2
        assert cluster.categories == {"food": 2}
        assert len(cluster.marker_ids) == 2
        assert cluster.id == "cluster:" + "|".join(cluster.marker_ids)

    def test_markers_separate_when_zoomed_in(self):
        singles, clusters = cluster_markers(self.markers(), zoom=16)
        assert len(singles) == 3
        assert clusters == []

    def test_nothing_clusters_at_max_zoom(self):
        singles, clusters = cluster_markers(self.markers(), zoom=3, max_zoom=3)
        assert len(singles) == 3
        assert clusters == []

    def test_everything_clusters_at_world_zoom(self):
        singles, clusters = cluster_markers(self.markers(), zoom=2)
        assert singles == []
        assert clusters[0].quest_count == 3

    def test_single_marker_is_never_a_cluster(self):
        markers = build_markers([quest("a")], {}, PROFILES, "bob")
        assert cluster_markers(markers, zoom=0) == (markers, [])


class TestMapRenderer:
    def test_render_full_view(self):
        camera = Camera(lat=1.35, lng=103.8, zoom=12)
        view = MapRenderer(grid_size=60, max_zoom=17).render(
            [quest("a"), quest("b", place="North Spine")], {}, PROFILES, "bob", camera
        )
        assert view.camera == camera
        assert view.markers == []
        assert len(view.clusters) == 1


class TestMapCamera:
    def test_defaults(self):
        camera = MapCamera()
        assert (camera.lat, camera.lng, camera.zoom) == (1.3521, 103.8198, 12)

    def test_focus_zooms_in(self):
        camera = MapCamera()
        camera.focus(*PLACES["NTU"])
        assert camera.snapshot() == Camera(lat=PLACES["NTU"][0], lng=PLACES["NTU"][1], zoom=16)

    @pytest.mark.parametrize("level,expected", [(-3, 0), (14, 14), (40, 21)])
    def test_zoom_is_clamped(self, level, expected):
        camera = MapCamera()
        camera.set_zoom(level)
        assert camera.zoom == expected


class TestMarkerActionDispatcher:
    def test_dispatches_to_registered_handler(self):
        calls = []
        dispatcher = MarkerActionDispatcher()
        dispatcher.on("join", lambda quest_id: calls.append(("join", quest_id)) or "joined")
        assert dispatcher.dispatch(MarkerAction(quest_id="q1", action="join")) == "joined"
        assert calls == [("join", "q1")]

    def test_unknown_action_cannot_be_registered(self):
        with pytest.raises(ValueError):
            MarkerActionDispatcher().on("delete", lambda quest_id: None)

    def test_unregistered_action(self):
        with pytest.raises(ValueError):
            MarkerActionDispatcher().dispatch(MarkerAction(quest_id="q1", action="leave"))
