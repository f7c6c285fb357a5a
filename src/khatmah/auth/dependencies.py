"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from khatmah.auth.jwt import verify_token
from khatmah.dependencies import get_storage
from khatmah.errors import AuthenticationError
from khatmah.storage.interface import KhatmahStorage, UserRecord

# auto_error=False so a missing header is a 401, not FastAPI's default 403.
_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    storage: KhatmahStorage = Depends(get_storage),
) -> UserRecord:
    """
    Extract and verify the bearer JWT, return the user.

    Raises AuthenticationError (401) on any failure.
    """
    if credentials is None:
        raise AuthenticationError

    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError from e

    user = await storage.get_user(int(payload["sub"]))
    if user is None:
        raise AuthenticationError
    return user
