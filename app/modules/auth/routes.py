from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, CurrentUser
)
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_current_user_id, security
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Create an account; display name and gender feed the quest board's participant lists"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    return service.login(login_data)


@router.post("/logout")
async def logout(
    credentials: HTTPAuthorizationCredentials = Security(security),
    service: AuthService = Depends(get_auth_service)
):
    service.logout(credentials.credentials)
    return {"message": "Logged out"}


@router.get("/me", response_model=CurrentUser)
async def me(user_data: Dict = Depends(get_current_user_id)):
    """The caller as resolved from the bearer token"""
    return user_data
