"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from khatmah.schemas import CamelModel


class RegisterRequest(CamelModel):
    """Register with username + password."""

    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=1, max_length=128)
    display_name: str | None = Field(None, min_length=1, max_length=64)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: Any) -> Any:  # noqa: ANN401
        """Trim surrounding whitespace before the pattern check."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("display_name", mode="before")
    @classmethod
    def blank_display_name_to_none(cls, v: Any) -> Any:  # noqa: ANN401
        """A whitespace-only display name means "use the username"."""
        if isinstance(v, str):
            return v.strip() or None
        return v


class LoginRequest(CamelModel):
    """Login with username + password."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(CamelModel):
    """Authenticated user's own profile."""

    id: int
    username: str
    display_name: str
    khatmah_count: int
    created_at: datetime


class TokenResponse(CamelModel):
    """Access token plus the user it belongs to."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
