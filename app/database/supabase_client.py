from fastapi import HTTPException
from supabase import create_client, Client
from app.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    """One anon-key client per process; row access rules are checked in the services."""
    _client: Optional[Client] = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            if not settings.supabase_url or not settings.supabase_key:
                raise HTTPException(status_code=503, detail="Quest store is not configured")
            logger.info(f"Connecting to Supabase at {settings.supabase_url}")
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client


def get_supabase() -> Client:
    return SupabaseClient.get_client()
