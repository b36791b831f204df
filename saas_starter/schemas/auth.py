"""Auth request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class MagicLinkRequest(BaseModel):
    email: EmailStr
    redirectTo: Optional[str] = None


class AuthUser(BaseModel):
    """Principal as reported by the auth provider."""

    id: str
    email: Optional[str] = None
    lastSignInAt: Optional[datetime] = None
    role: Optional[str] = None


class AuthSession(BaseModel):
    accessToken: str
    refreshToken: Optional[str] = None
    expiresAt: Optional[int] = None
    tokenType: str = "bearer"
    user: AuthUser


class SessionResponse(BaseModel):
    user: AuthUser
    expiresAt: Optional[int] = None


class MessageResponse(BaseModel):
    ok: bool = True
    message: Optional[str] = None


class AuthStatusResponse(BaseModel):
    session: dict
    environment: dict
