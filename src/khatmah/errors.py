"""Domain exceptions.

Every error raised by the tracker, aggregator, storage and auth layers derives
from KhatmahError. The HTTP mapping lives in khatmah.middleware.error_handler.
"""

from __future__ import annotations


class KhatmahError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str = "Internal Server Error") -> None:
        self.message = message
        super().__init__(message)


class AuthenticationError(KhatmahError):
    """No valid session (missing, expired or invalid bearer token)."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ValidationError(KhatmahError):
    """Malformed input: wrong type or out-of-range juz number."""


class IncompletePrerequisiteError(KhatmahError):
    """Completion attempted before all parts are done."""

    def __init__(self, completed_parts: int) -> None:
        self.completed_parts = completed_parts
        super().__init__("You must complete all 30 parts first.")


class ConflictError(KhatmahError):
    """Unique constraint would be violated (e.g. username taken)."""


class NotFoundError(KhatmahError):
    """Referenced user does not exist."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class StorageError(KhatmahError):
    """Any I/O or transaction failure in the storage layer."""
