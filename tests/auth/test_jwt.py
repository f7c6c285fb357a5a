"""Tests for JWT token management."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from khatmah.auth.jwt import create_access_token, verify_token
from khatmah.config import get_settings


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token(user_id=1, username="ahmed")
        payload = verify_token(token, expected_type="access")
        assert payload["sub"] == "1"
        assert payload["username"] == "ahmed"
        assert payload["type"] == "access"
        assert payload["iss"] == "khatmah-api"

    def test_wrong_type_rejected(self):
        token = create_access_token(user_id=1, username="ahmed")
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(token, expected_type="refresh")

    def test_tampered_signature_rejected(self):
        token = create_access_token(user_id=1, username="ahmed")
        claims = jwt.decode(token, options={"verify_signature": False})
        forged = jwt.encode(claims, "another-secret-of-at-least-32-bytes", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(forged)

    def test_expired_token_rejected(self):
        settings = get_settings()
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": "1",
                "iat": now - timedelta(hours=2),
                "exp": now - timedelta(hours=1),
                "iss": settings.jwt_issuer,
                "type": "access",
            },
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(token)

    def test_wrong_issuer_rejected(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": "1", "iss": "someone-else", "type": "access"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)
