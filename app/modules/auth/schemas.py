from pydantic import BaseModel, EmailStr
from typing import Optional
from app.modules.profiles.schemas import Gender


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    display_name: Optional[str] = None
    gender: Optional[Gender] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    display_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    display_name: Optional[str] = None


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
