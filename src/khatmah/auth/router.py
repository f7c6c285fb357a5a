"""Authentication router — /api/register, /api/login, /api/logout, /api/user."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException

from khatmah.auth.dependencies import get_current_user
from khatmah.auth.jwt import create_access_token
from khatmah.auth.password import PasswordStrengthError
from khatmah.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from khatmah.auth.service import authenticate_user, register_user
from khatmah.config import get_settings
from khatmah.dependencies import get_storage
from khatmah.schemas import MessageResponse
from khatmah.storage.interface import KhatmahStorage, UserRecord

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["Authentication"])


def _token_response(user: UserRecord) -> TokenResponse:
    """Issue an access token for a user."""
    settings = get_settings()
    return TokenResponse(
        access_token=create_access_token(user.id, user.username),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    storage: KhatmahStorage = Depends(get_storage),
) -> TokenResponse:
    """Register with username + password. ConflictError surfaces as 409."""
    try:
        user = await register_user(storage, body.username, body.password, body.display_name)
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    storage: KhatmahStorage = Depends(get_storage),
) -> TokenResponse:
    """Login with username + password."""
    user = await authenticate_user(storage, body.username, body.password)
    return _token_response(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: UserRecord = Depends(get_current_user)) -> MessageResponse:
    """Tokens are stateless; the client drops its copy."""
    logger.info("logout", user_id=user.id)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserResponse)
async def current_user(user: UserRecord = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse.model_validate(user)
