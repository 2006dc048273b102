import threading
import httpx
from datetime import datetime, timezone
from app.config import settings
from app.modules.questbook.defaults import DEFAULT_QUOTES, DEFAULT_REFLECTIONS
from app.modules.questbook.schemas import (
    Quote, QuotesResponse, ReflectionResponse, REFLECTION_CATEGORIES
)
from typing import Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class DailyContentService:
    """
    Client for the daily-quotes / daily-reflection functions.

    Results are cached per UTC calendar day (and category for reflections);
    entries from earlier days are dropped. Any failure falls back to the
    built-in defaults and is not cached, so the next request tries again.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        today: Callable[[], str] = _today,
    ):
        self.base_url = (base_url or settings.get_daily_content_url()).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_key
        self.client = client or httpx.Client(timeout=settings.daily_content_timeout)
        self.today = today
        self._lock = threading.Lock()
        self._quotes: Dict[str, List[Quote]] = {}
        self._reflections: Dict[str, str] = {}

    def close(self) -> None:
        self.client.close()

    def _post(self, function: str, body: dict) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        response = self.client.post(f"{self.base_url}/{function}", json=body, headers=headers)
        response.raise_for_status()
        return response.json()

    def get_quotes(self) -> QuotesResponse:
        today = self.today()
        with self._lock:
            cached = self._quotes.get(today)
        if cached:
            return QuotesResponse(date=today, quotes=cached)
        try:
            payload = self._post("daily-quotes", {})
            quotes = [Quote(**q) for q in payload["quotes"]]
            if not quotes:
                raise ValueError("empty quote list")
        except Exception as e:
            logger.warning(f"Daily quotes unavailable, using defaults: {e}")
            return QuotesResponse(date=today, quotes=[Quote(**q) for q in DEFAULT_QUOTES], fallback=True)
        with self._lock:
            self._quotes = {today: quotes}
        return QuotesResponse(date=today, quotes=quotes)

    def get_reflection(self, category: str) -> ReflectionResponse:
        category = (category or "").strip().lower()
        if category not in REFLECTION_CATEGORIES:
            category = "stressed"
        today = self.today()
        key = f"{today}_{category}"
        with self._lock:
            cached = self._reflections.get(key)
        if cached:
            return ReflectionResponse(date=today, category=category, question=cached)
        try:
            payload = self._post("daily-reflection", {"category": category})
            question = (payload.get("question") or "").strip()
            if not question:
                raise ValueError("empty question")
        except Exception as e:
            logger.warning(f"Daily reflection ({category}) unavailable, using default: {e}")
            return ReflectionResponse(
                date=today, category=category, question=DEFAULT_REFLECTIONS[category], fallback=True
            )
        with self._lock:
            self._reflections = {k: v for k, v in self._reflections.items() if k.startswith(today)}
            self._reflections[key] = question
        return ReflectionResponse(date=today, category=category, question=question)
