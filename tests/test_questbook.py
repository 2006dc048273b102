"""
Tests for the QuestBreak daily quotes and reflection questions.
"""

import httpx
import pytest

from app.modules.questbook.defaults import DEFAULT_QUOTES, DEFAULT_REFLECTIONS
from app.modules.questbook.routes import get_daily_content_service
from app.modules.questbook.service import DailyContentService
from app.main import app
from tests.conftest import auth


class Upstream:
    """Mock edge functions that count calls and can be switched off."""

    def __init__(self):
        self.calls = []
        self.down = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.down:
            return httpx.Response(503)
        if request.url.path.endswith("/daily-quotes"):
            return httpx.Response(200, json={"quotes": [{"text": f"Quote {len(self.calls)}", "author": "Someone"}]})
        body = request.read().decode()
        return httpx.Response(200, json={"question": f"How are you feeling? {body}"})


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def today():
    return {"value": "2026-03-01"}


@pytest.fixture
def service(upstream, today):
    return DailyContentService(
        base_url="https://example.supabase.co/functions/v1/",
        api_key="anon",
        client=httpx.Client(transport=httpx.MockTransport(upstream)),
        today=lambda: today["value"],
    )


class TestQuotes:
    def test_cached_for_the_day(self, service, upstream):
        first = service.get_quotes()
        second = service.get_quotes()
        assert first.quotes[0].text == "Quote 1"
        assert second == first
        assert len(upstream.calls) == 1
        assert str(upstream.calls[0].url) == "https://example.supabase.co/functions/v1/daily-quotes"
        assert upstream.calls[0].headers["apikey"] == "anon"

    def test_refreshed_next_day(self, service, upstream, today):
        service.get_quotes()
        today["value"] = "2026-03-02"
        refreshed = service.get_quotes()
        assert refreshed.date == "2026-03-02"
        assert refreshed.quotes[0].text == "Quote 2"

    def test_fallback_is_not_cached(self, service, upstream):
        upstream.down = True
        fallback = service.get_quotes()
        assert fallback.fallback is True
        assert len(fallback.quotes) == len(DEFAULT_QUOTES)

        upstream.down = False
        assert service.get_quotes().fallback is False

    def test_empty_list_falls_back(self, today):
        handler = lambda request: httpx.Response(200, json={"quotes": []})
        service = DailyContentService(
            base_url="https://x", api_key="", client=httpx.Client(transport=httpx.MockTransport(handler)),
            today=lambda: today["value"],
        )
        assert service.get_quotes().fallback is True


class TestReflection:
    def test_cached_per_category(self, service, upstream):
        stressed = service.get_reflection("stressed")
        assert service.get_reflection("Stressed ") == stressed
        sleep = service.get_reflection("sleep")
        assert sleep.category == "sleep"
        assert '"sleep"' in sleep.question
        assert len(upstream.calls) == 2

    def test_unknown_category_uses_stressed(self, service):
        assert service.get_reflection("hungry").category == "stressed"

    def test_fallback(self, service, upstream):
        upstream.down = True
        reflection = service.get_reflection("burnout")
        assert reflection.fallback is True
        assert reflection.question == DEFAULT_REFLECTIONS["burnout"]


class TestRoutes:
    @pytest.fixture
    def questbook_client(self, client, service):
        app.dependency_overrides[get_daily_content_service] = lambda: service
        return client

    def test_quotes(self, questbook_client):
        response = questbook_client.get("/api/v1/questbook/quotes", headers=auth("alice"))
        assert response.status_code == 200
        assert response.json()["date"] == "2026-03-01"

    def test_reflection(self, questbook_client):
        response = questbook_client.get("/api/v1/questbook/reflection?category=burnout", headers=auth("alice"))
        assert response.status_code == 200
        assert response.json()["category"] == "burnout"
