import hashlib
import threading
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from fastapi import HTTPException
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class TokenCache:
    """
    Short-lived token -> user lookups. A board session re-authenticates on
    every REST call it makes, so this spares most round trips to Supabase Auth.
    Tokens are stored hashed.
    """

    def __init__(self, ttl: float = 60, max_size: int = 500):
        self.ttl = ttl
        self.max_size = max_size
        self._entries: Dict[str, tuple] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def get(self, token: str) -> Optional[Dict[str, Any]]:
        key = self._key(token)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            user, expires = entry
            if time.monotonic() >= expires:
                del self._entries[key]
                return None
            return user

    def put(self, token: str, user: Dict[str, Any]) -> None:
        with self._lock:
            if len(self._entries) >= self.max_size:
                now = time.monotonic()
                self._entries = {k: v for k, v in self._entries.items() if v[1] > now}
            if len(self._entries) < self.max_size:
                self._entries[self._key(token)] = (user, time.monotonic() + self.ttl)

    def drop(self, token: str) -> None:
        with self._lock:
            self._entries.pop(self._key(token), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_token_cache = TokenCache()


def _display_name(user) -> Optional[str]:
    metadata = getattr(user, "user_metadata", None) or {}
    return metadata.get("display_name")


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Create the account and its profile row (display name, gender)"""
        try:
            display_name = (register_data.display_name or "").strip() or None
            metadata = {"display_name": display_name, "gender": register_data.gender}
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"data": {k: v for k, v in metadata.items() if v}},
            })
            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            user_id = auth_response.user.id
            self.supabase.table("profiles").upsert(
                {"id": user_id, "display_name": display_name, "gender": register_data.gender},
                on_conflict="id",
            ).execute()
            logger.info(f"Registered user {user_id}")
            return RegisterResponse(
                user_id=user_id,
                email=auth_response.user.email or register_data.email,
                display_name=display_name,
            )
        except HTTPException:
            raise
        except Exception as e:
            message = str(e).lower()
            if "already registered" in message or "already exists" in message:
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {e}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password,
            })
            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            return TokenResponse(
                access_token=auth_response.session.access_token,
                user_id=auth_response.user.id,
                display_name=_display_name(auth_response.user),
            )
        except HTTPException:
            raise
        except Exception as e:
            message = str(e).lower()
            if "invalid" in message or "credentials" in message:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {e}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve an access token to {"id", "email", "display_name"}. 401 when it is not valid."""
        cached = _token_cache.get(token)
        if cached is not None:
            return cached
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.debug(f"Token rejected: {e}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        user = user_response.user
        user_data = {"id": user.id, "email": user.email, "display_name": _display_name(user)}
        _token_cache.put(token, user_data)
        return user_data

    def logout(self, token: str) -> bool:
        _token_cache.drop(token)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False


def clear_auth_cache() -> None:
    _token_cache.clear()
