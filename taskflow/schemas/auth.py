"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import Field

from taskflow.schemas.common import CamelModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., max_length=256, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6, max_length=128)
    # Accepted for compatibility, never honoured: registration always creates a 'user'.
    role: str | None = None


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=256)
    password: str = Field(..., max_length=128)


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(..., max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)


class UpdateProfileRequest(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=50)
    email: str | None = Field(default=None, max_length=256, pattern=EMAIL_PATTERN)


class UserProfile(CamelModel):
    """Public view of a user. Never carries credential fields."""

    id: int
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime


class AuthData(CamelModel):
    user: UserProfile
    access_token: str
    refresh_token: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class RefreshData(CamelModel):
    access_token: str
    refresh_token: str | None = None
