"""Storage contract for users and their readings.

Implementations: khatmah.storage.sql.SqlStorage (SQLAlchemy) and
khatmah.storage.memory.MemoryStorage (in-process).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    password_hash: str
    display_name: str
    khatmah_count: int
    created_at: datetime


@dataclass(frozen=True)
class UserSummary:
    """The slice of a user the leaderboard needs."""

    id: int
    username: str
    display_name: str
    khatmah_count: int


@dataclass(frozen=True)
class ReadingRecord:
    id: int
    user_id: int
    juz_number: int
    is_completed: bool
    completed_at: datetime | None


class KhatmahStorage(Protocol):
    """Async storage operations used by the tracker, the aggregator and auth."""

    async def create_user(self, username: str, password_hash: str, display_name: str) -> UserRecord:
        """Insert a user together with its 30 incomplete readings.

        Raises ConflictError if the username is taken.
        """
        ...

    async def get_user(self, user_id: int) -> UserRecord | None:
        """Fetch a user by id."""
        ...

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        """Fetch a user by username (case-insensitive)."""
        ...

    async def list_user_summaries(self) -> list[UserSummary]:
        """All users, for the leaderboard."""
        ...

    async def get_readings(self, user_id: int) -> list[ReadingRecord]:
        """All 30 readings ordered by juz number, backfilling any missing part."""
        ...

    async def upsert_reading(self, user_id: int, juz_number: int, is_completed: bool) -> ReadingRecord:
        """Set the completion flag of a single reading."""
        ...

    async def reset_readings_and_increment(self, user_id: int) -> int:
        """Atomically reset all readings and bump the completed-cycle count.

        Re-verifies inside the same unit that every part is complete and raises
        IncompletePrerequisiteError otherwise. Returns the new count.
        """
        ...
