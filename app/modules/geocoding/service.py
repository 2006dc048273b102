import asyncio
import threading
import httpx
from app.config import settings
from app.core.exceptions import GeocodeNotFound, UpstreamError
from app.modules.geocoding.schemas import Coordinates, Suggestion
from fastapi import HTTPException
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"


class GeocodingService:
    """Google Maps geocoding and places autocomplete."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        region: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.region = region or settings.geocoding_region
        self.client = client or httpx.Client(timeout=timeout or settings.geocoding_timeout)

    def close(self) -> None:
        self.client.close()

    def _require_key(self) -> str:
        if not self.api_key:
            raise HTTPException(status_code=500, detail="Google Maps API key not configured")
        return self.api_key

    def geocode(self, address: str) -> Coordinates:
        """Resolve a free-text address. Single attempt; raises GeocodeNotFound when there is no match."""
        address = (address or "").strip()
        if not address:
            raise GeocodeNotFound(address)
        key = self._require_key()
        try:
            response = self.client.get(
                GEOCODE_URL,
                params={"address": address, "region": self.region, "key": key},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed for {address!r}: {e}")
            raise UpstreamError("Geocoding service unavailable")

        status = payload.get("status")
        results = payload.get("results") or []
        if status == "ZERO_RESULTS" or (status == "OK" and not results):
            logger.info(f"No geocoding match for {address!r}")
            raise GeocodeNotFound(address)
        if status != "OK":
            logger.error(f"Geocoding error for {address!r}: {status} {payload.get('error_message', '')}")
            raise UpstreamError(f"Geocoding failed: {status}")

        first = results[0]
        location = first["geometry"]["location"]
        return Coordinates(
            lat=location["lat"],
            lng=location["lng"],
            formatted_address=first.get("formatted_address"),
        )

    def autocomplete(self, text: str, region: Optional[str] = None) -> List[Suggestion]:
        """Location suggestions while typing. Never raises: any failure means no suggestions."""
        text = (text or "").strip()
        if not text:
            return []
        try:
            key = self._require_key()
            response = self.client.get(
                AUTOCOMPLETE_URL,
                params={
                    "input": text,
                    "components": f"country:{region or self.region}",
                    "key": key,
                },
            )
            response.raise_for_status()
            payload = response.json()
        except Exception as e:
            logger.warning(f"Autocomplete failed for {text!r}: {e}")
            return []

        if payload.get("status") not in ("OK", "ZERO_RESULTS"):
            logger.warning(f"Autocomplete error for {text!r}: {payload.get('status')}")
            return []
        return [
            Suggestion(label=p["description"], place_id=p["place_id"])
            for p in payload.get("predictions") or []
            if p.get("description") and p.get("place_id")
        ]


class AutocompleteSession:
    """
    Latest-request-wins wrapper around GeocodingService.autocomplete.

    Each call takes a sequence number; when it completes after a newer call
    has started, its result is discarded and suggest() returns None.
    """

    def __init__(self, service: GeocodingService, region: Optional[str] = None):
        self.service = service
        self.region = region
        self._lock = threading.Lock()
        self._latest = 0

    def begin(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_latest(self, seq: int) -> bool:
        with self._lock:
            return seq == self._latest

    async def suggest(self, text: str) -> Optional[List[Suggestion]]:
        seq = self.begin()
        suggestions = await asyncio.to_thread(self.service.autocomplete, text, self.region)
        if not self.is_latest(seq):
            logger.debug(f"Discarding stale autocomplete result #{seq} for {text!r}")
            return None
        return suggestions
