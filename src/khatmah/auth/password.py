"""Argon2id password hashes and the minimum strength rules for new accounts."""

from __future__ import annotations

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

from khatmah.config import get_settings

# 64 MiB, two passes. Verification reads the parameters from the stored hash.
_hasher = PasswordHasher(time_cost=2, memory_cost=64 * 1024, parallelism=1, type=Type.ID)


class PasswordStrengthError(ValueError):
    """The password fails one of the registration rules."""


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True on match. A mismatch or an unparseable stored hash is just False."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def validate_password_strength(password: str) -> None:
    """Raise PasswordStrengthError naming the first rule the password breaks.

    Length bounds come from settings; the password also needs a letter and a digit.
    """
    settings = get_settings()
    rules = (
        (password.strip() != "", "Password cannot be empty"),
        (
            len(password) >= settings.password_min_length,
            f"Password must be at least {settings.password_min_length} characters",
        ),
        (
            len(password) <= settings.password_max_length,
            f"Password must not exceed {settings.password_max_length} characters",
        ),
        (any(c.isalpha() for c in password), "Password must contain a letter"),
        (any(c.isdigit() for c in password), "Password must contain a digit"),
    )
    for ok, message in rules:
        if not ok:
            raise PasswordStrengthError(message)
