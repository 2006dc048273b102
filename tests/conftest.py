"""
Pytest configuration and shared fixtures.

The Supabase client, realtime hub and Google Maps client are swapped for
in-memory fakes through FastAPI dependency overrides.
"""

import datetime as dt
import time
from zoneinfo import ZoneInfo

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_hub
from app.core.realtime import RealtimeHub
from app.database.supabase_client import get_supabase
from app.main import app
from app.modules.auth.service import clear_auth_cache
from app.modules.geocoding.routes import get_geocoding_service
from app.modules.geocoding.service import GeocodingService
from app.modules.quests.schemas import QuestCreate
from tests.fakes import FakeSupabase


PLACES = {
    "NTU": (1.3483, 103.6831),
    "North Spine": (1.3472, 103.6801),
    "Marina Bay Sands": (1.2834, 103.8607),
}

USERS = {
    "alice": ("token-alice", "Alice", "female"),
    "bob": ("token-bob", "Bob", "male"),
    "carol": ("token-carol", "Carol", None),
}


def maps_handler(request: httpx.Request) -> httpx.Response:
    """Google Maps geocode/autocomplete responses for the PLACES above."""
    if request.url.path.endswith("/geocode/json"):
        address = request.url.params.get("address")
        if address == "Offline":
            return httpx.Response(503)
        if address not in PLACES:
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        lat, lng = PLACES[address]
        return httpx.Response(200, json={
            "status": "OK",
            "results": [{"formatted_address": address, "geometry": {"location": {"lat": lat, "lng": lng}}}],
        })
    if request.url.path.endswith("/autocomplete/json"):
        text = request.url.params.get("input", "")
        if text == "boom":
            return httpx.Response(500)
        predictions = [
            {"description": name, "place_id": f"place-{i}"}
            for i, name in enumerate(PLACES)
            if name.lower().startswith(text.lower())
        ]
        return httpx.Response(200, json={"status": "OK" if predictions else "ZERO_RESULTS", "predictions": predictions})
    return httpx.Response(404)


def sg_today() -> dt.date:
    return dt.datetime.now(ZoneInfo("Asia/Singapore")).date()


def quest_payload(**overrides) -> dict:
    payload = {
        "title": "Lunch",
        "category": "food",
        "date": (sg_today() + dt.timedelta(days=1)).isoformat(),
        "start_time": "12:00",
        "end_time": "13:00",
        "location": "NTU",
    }
    payload.update(overrides)
    return payload


def make_quest(**overrides) -> QuestCreate:
    return QuestCreate(**quest_payload(**overrides))


@pytest.fixture(autouse=True)
def _reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def supabase() -> FakeSupabase:
    db = FakeSupabase()
    for user_id, (token, name, gender) in USERS.items():
        db.add_user(user_id, token, display_name=name, gender=gender)
    return db


@pytest.fixture
def hub() -> RealtimeHub:
    return RealtimeHub()


@pytest.fixture
def geocoder() -> GeocodingService:
    return GeocodingService(
        api_key="test-key",
        region="sg",
        client=httpx.Client(transport=httpx.MockTransport(maps_handler)),
    )


@pytest.fixture
def client(supabase, hub, geocoder):
    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_hub] = lambda: hub
    app.dependency_overrides[get_geocoding_service] = lambda: geocoder
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {USERS[user_id][0]}"}


def wait_for(predicate, timeout: float = 2.0) -> bool:
    """Poll until predicate() is true; server-side cleanup of a WebSocket finishes on another thread."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
