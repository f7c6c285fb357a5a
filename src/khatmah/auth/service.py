"""
Authentication business logic.

Handles registration and credential checks against the storage layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from khatmah.auth.password import hash_password, validate_password_strength, verify_password
from khatmah.errors import AuthenticationError

if TYPE_CHECKING:
    from khatmah.storage.interface import KhatmahStorage, UserRecord

logger = structlog.get_logger()


async def register_user(
    storage: KhatmahStorage,
    username: str,
    password: str,
    display_name: str | None = None,
) -> UserRecord:
    """
    Register a new user. Their 30 readings are created alongside.

    Raises:
        PasswordStrengthError: If the password is too weak.
        ConflictError: If the username is already taken.
    """
    validate_password_strength(password)
    username = username.strip()
    return await storage.create_user(
        username=username,
        password_hash=hash_password(password),
        display_name=(display_name or "").strip() or username,
    )


async def authenticate_user(storage: KhatmahStorage, username: str, password: str) -> UserRecord:
    """
    Check username + password.

    Raises:
        AuthenticationError: If credentials are invalid.
    """
    user = await storage.get_user_by_username(username.strip())
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username)
        msg = "Invalid username or password"
        raise AuthenticationError(msg)
    logger.info("login_succeeded", user_id=user.id)
    return user
