"""Bearer session tokens.

An access token is an HS256 JWT whose ``sub`` is the user id. Tokens are not
stored server-side, so logging out is the client discarding its copy.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from khatmah.config import get_settings

_REQUIRED_CLAIMS = ["sub", "exp", "iss", "type"]


def create_access_token(user_id: int, username: str) -> str:
    """Sign a token for the user that expires after the configured lifetime."""
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "username": username,
        "type": "access",
        "iss": settings.jwt_issuer,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = "access") -> dict[str, Any]:
    """Decode a token and return its claims.

    Raises:
        jwt.InvalidTokenError: Bad signature, wrong issuer, expired, missing
            claims, or a token type other than ``expected_type``.
    """
    settings = get_settings()
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    token_type = claims["type"]
    if token_type != expected_type:
        msg = f"Expected token type '{expected_type}', got '{token_type}'"
        raise jwt.InvalidTokenError(msg)
    return claims
