"""
Core dependencies for route protection
"""

from fastapi import Depends, HTTPException, Security, WebSocket, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.realtime import RealtimeHub, get_realtime_hub
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_hub() -> RealtimeHub:
    return get_realtime_hub()


async def authenticate_websocket(websocket: WebSocket, auth_service: AuthService) -> Optional[Dict[str, Any]]:
    """
    Resolve the user for a WebSocket from ?token= or the Authorization header.
    Closes the socket with 1008 and returns None when the token is missing or invalid.
    """
    token = websocket.query_params.get("token")
    if not token:
        header = websocket.headers.get("authorization", "")
        if header.lower().startswith("bearer "):
            token = header[7:]
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None
    try:
        return auth_service.get_current_user(token)
    except HTTPException:
        logger.info("Rejected WebSocket with invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None
