"""SQLAlchemy-backed storage.

Each public method is one unit of work: it commits on success and rolls back
on any failure. Database errors are wrapped in StorageError; domain errors
propagate unchanged.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from khatmah.db.models import TOTAL_JUZ, Reading, User
from khatmah.errors import (
    ConflictError,
    IncompletePrerequisiteError,
    KhatmahError,
    NotFoundError,
    StorageError,
)
from khatmah.storage.interface import ReadingRecord, UserRecord, UserSummary

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def _user_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        username=user.username,
        password_hash=user.password_hash,
        display_name=user.display_name,
        khatmah_count=user.khatmah_count,
        created_at=user.created_at,
    )


def _reading_record(reading: Reading) -> ReadingRecord:
    return ReadingRecord(
        id=reading.id,
        user_id=reading.user_id,
        juz_number=reading.juz_number,
        is_completed=reading.is_completed,
        completed_at=reading.completed_at,
    )


class SqlStorage:
    """KhatmahStorage over an AsyncSession."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def _unit(self, operation: str) -> AsyncIterator[None]:
        """Commit on success, roll back and translate database errors on failure."""
        try:
            yield
            await self.db.commit()
        except KhatmahError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("storage_error", operation=operation, error=str(exc), exc_info=exc)
            msg = f"Storage operation failed: {operation}"
            raise StorageError(msg) from exc

    async def _require_user(self, user_id: int, *, for_update: bool = False) -> User:
        stmt = select(User).where(User.id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        user = (await self.db.execute(stmt)).scalar_one_or_none()
        if user is None:
            raise NotFoundError(user_id)
        return user

    # --- Users ---

    async def create_user(self, username: str, password_hash: str, display_name: str) -> UserRecord:
        try:
            async with self._unit("create_user"):
                existing = await self.db.execute(
                    select(User.id).where(func.lower(User.username) == username.lower())
                )
                if existing.scalar_one_or_none() is not None:
                    msg = "Username already exists"
                    raise ConflictError(msg)

                now = datetime.now(timezone.utc)
                user = User(
                    username=username,
                    password_hash=password_hash,
                    display_name=display_name,
                    khatmah_count=0,
                    created_at=now,
                )
                self.db.add(user)
                await self.db.flush()
                self.db.add_all(
                    Reading(user_id=user.id, juz_number=juz, is_completed=False, updated_at=now)
                    for juz in range(1, TOTAL_JUZ + 1)
                )
                await self.db.flush()
        except StorageError as exc:
            # Lost a race on the unique username index.
            if isinstance(exc.__cause__, IntegrityError):
                msg = "Username already exists"
                raise ConflictError(msg) from exc
            raise

        logger.info("user_created", user_id=user.id, username=username)
        return _user_record(user)

    async def get_user(self, user_id: int) -> UserRecord | None:
        async with self._unit("get_user"):
            user = await self.db.get(User, user_id)
        return _user_record(user) if user is not None else None

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        async with self._unit("get_user_by_username"):
            result = await self.db.execute(select(User).where(func.lower(User.username) == username.lower()))
            user = result.scalar_one_or_none()
        return _user_record(user) if user is not None else None

    async def list_user_summaries(self) -> list[UserSummary]:
        async with self._unit("list_user_summaries"):
            result = await self.db.execute(
                select(User.id, User.username, User.display_name, User.khatmah_count).order_by(
                    User.khatmah_count.desc(), User.username.asc()
                )
            )
            rows = result.all()
        return [
            UserSummary(id=row.id, username=row.username, display_name=row.display_name, khatmah_count=row.khatmah_count)
            for row in rows
        ]

    # --- Readings ---

    async def _load_readings(self, user_id: int) -> list[Reading]:
        result = await self.db.execute(
            select(Reading).where(Reading.user_id == user_id).order_by(Reading.juz_number)
        )
        return list(result.scalars().all())

    async def get_readings(self, user_id: int) -> list[ReadingRecord]:
        async with self._unit("get_readings"):
            await self._require_user(user_id)
            readings = await self._load_readings(user_id)
            if len(readings) < TOTAL_JUZ:
                present = {r.juz_number for r in readings}
                now = datetime.now(timezone.utc)
                self.db.add_all(
                    Reading(user_id=user_id, juz_number=juz, is_completed=False, updated_at=now)
                    for juz in range(1, TOTAL_JUZ + 1)
                    if juz not in present
                )
                await self.db.flush()
                logger.info("readings_backfilled", user_id=user_id, missing=TOTAL_JUZ - len(present))
                readings = await self._load_readings(user_id)
        return [_reading_record(r) for r in readings]

    async def upsert_reading(self, user_id: int, juz_number: int, is_completed: bool) -> ReadingRecord:
        async with self._unit("upsert_reading"):
            now = datetime.now(timezone.utc)
            result = await self.db.execute(
                select(Reading).where(Reading.user_id == user_id, Reading.juz_number == juz_number)
            )
            reading = result.scalar_one_or_none()
            if reading is None:
                await self._require_user(user_id)
                reading = Reading(user_id=user_id, juz_number=juz_number, is_completed=False, updated_at=now)
                self.db.add(reading)

            if is_completed and not reading.is_completed:
                reading.completed_at = now
            elif not is_completed:
                reading.completed_at = None
            reading.is_completed = is_completed
            reading.updated_at = now
            await self.db.flush()
        return _reading_record(reading)

    async def reset_readings_and_increment(self, user_id: int) -> int:
        async with self._unit("reset_readings_and_increment"):
            # PostgreSQL queues a second completion on the row lock; SQLite ignores
            # FOR UPDATE and serializes the writes below instead.
            await self._require_user(user_id, for_update=True)

            # Compare-and-set: only completed rows are reset, and all 30 must be.
            # A concurrent completion that committed first leaves nothing to match.
            now = datetime.now(timezone.utc)
            reset = await self.db.execute(
                update(Reading)
                .where(Reading.user_id == user_id, Reading.is_completed.is_(True))
                .values(is_completed=False, completed_at=None, updated_at=now)
            )
            if reset.rowcount != TOTAL_JUZ:
                raise IncompletePrerequisiteError(reset.rowcount)

            new_count = await self.db.scalar(
                update(User)
                .where(User.id == user_id)
                .values(khatmah_count=User.khatmah_count + 1)
                .returning(User.khatmah_count)
                .execution_options(synchronize_session="fetch")
            )
        return new_count
