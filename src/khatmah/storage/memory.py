"""In-process storage for local development and tests.

A single asyncio.Lock guards every mutation, which gives the same
all-or-nothing visibility the SQL backend gets from its transactions.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import replace
from datetime import datetime, timezone

import structlog

from khatmah.db.models import TOTAL_JUZ
from khatmah.errors import ConflictError, IncompletePrerequisiteError, NotFoundError
from khatmah.storage.interface import ReadingRecord, UserRecord, UserSummary

logger = structlog.get_logger()


class MemoryStorage:
    """KhatmahStorage kept in dictionaries."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users: dict[int, UserRecord] = {}
        self._readings: dict[int, dict[int, ReadingRecord]] = {}
        self._user_ids = itertools.count(1)
        self._reading_ids = itertools.count(1)

    def _require_user(self, user_id: int) -> UserRecord:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(user_id)
        return user

    def _new_reading(self, user_id: int, juz_number: int) -> ReadingRecord:
        return ReadingRecord(
            id=next(self._reading_ids),
            user_id=user_id,
            juz_number=juz_number,
            is_completed=False,
            completed_at=None,
        )

    # --- Users ---

    async def create_user(self, username: str, password_hash: str, display_name: str) -> UserRecord:
        async with self._lock:
            if any(u.username.lower() == username.lower() for u in self._users.values()):
                msg = "Username already exists"
                raise ConflictError(msg)
            user = UserRecord(
                id=next(self._user_ids),
                username=username,
                password_hash=password_hash,
                display_name=display_name,
                khatmah_count=0,
                created_at=datetime.now(timezone.utc),
            )
            self._users[user.id] = user
            self._readings[user.id] = {juz: self._new_reading(user.id, juz) for juz in range(1, TOTAL_JUZ + 1)}
        logger.info("user_created", user_id=user.id, username=username)
        return user

    async def get_user(self, user_id: int) -> UserRecord | None:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        wanted = username.lower()
        return next((u for u in self._users.values() if u.username.lower() == wanted), None)

    async def list_user_summaries(self) -> list[UserSummary]:
        async with self._lock:
            users = list(self._users.values())
        return [
            UserSummary(id=u.id, username=u.username, display_name=u.display_name, khatmah_count=u.khatmah_count)
            for u in users
        ]

    # --- Readings ---

    async def get_readings(self, user_id: int) -> list[ReadingRecord]:
        async with self._lock:
            self._require_user(user_id)
            readings = self._readings.setdefault(user_id, {})
            for juz in range(1, TOTAL_JUZ + 1):
                if juz not in readings:
                    readings[juz] = self._new_reading(user_id, juz)
            return [readings[juz] for juz in sorted(readings)]

    async def upsert_reading(self, user_id: int, juz_number: int, is_completed: bool) -> ReadingRecord:
        async with self._lock:
            self._require_user(user_id)
            readings = self._readings.setdefault(user_id, {})
            current = readings.get(juz_number) or self._new_reading(user_id, juz_number)
            if is_completed:
                completed_at = current.completed_at or datetime.now(timezone.utc)
            else:
                completed_at = None
            updated = replace(current, is_completed=is_completed, completed_at=completed_at)
            readings[juz_number] = updated
            return updated

    async def reset_readings_and_increment(self, user_id: int) -> int:
        async with self._lock:
            user = self._require_user(user_id)
            readings = self._readings.get(user_id, {})
            completed = sum(1 for r in readings.values() if r.is_completed)
            if completed < TOTAL_JUZ:
                raise IncompletePrerequisiteError(completed)

            self._readings[user_id] = {
                juz: replace(r, is_completed=False, completed_at=None) for juz, r in readings.items()
            }
            self._users[user_id] = replace(user, khatmah_count=user.khatmah_count + 1)
            return user.khatmah_count + 1
