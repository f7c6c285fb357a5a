"""Progress tracker: per-juz completion state and the Khatmah completion transition.

Completion is always verified here against stored readings, never taken from
the client. The reset + increment itself is delegated to the storage layer,
which performs it as one atomic unit and re-checks the precondition under
its own lock.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from khatmah.db.models import TOTAL_JUZ
from khatmah.errors import IncompletePrerequisiteError, NotFoundError, ValidationError
from khatmah.storage.interface import KhatmahStorage, ReadingRecord

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProgressSummary:
    completed_parts: int
    total_parts: int
    percent_complete: float
    khatmah_count: int


def validate_reading_update(juz_number: object, is_completed: object) -> None:
    """Raise ValidationError for a non-integer or out-of-range juz, or a non-boolean flag."""
    # bool is a subclass of int; True must not pass as juz 1.
    if not isinstance(juz_number, int) or isinstance(juz_number, bool):
        msg = "Juz number must be an integer"
        raise ValidationError(msg)
    if not 1 <= juz_number <= TOTAL_JUZ:
        msg = f"Juz number must be between 1 and {TOTAL_JUZ}"
        raise ValidationError(msg)
    if not isinstance(is_completed, bool):
        msg = "isCompleted must be a boolean"
        raise ValidationError(msg)


class ProgressTracker:
    """Reads and mutates a user's reading state through a KhatmahStorage."""

    def __init__(self, storage: KhatmahStorage) -> None:
        self.storage = storage

    async def get_readings(self, user_id: int) -> list[ReadingRecord]:
        """Return the user's 30 readings ordered by juz number.

        Raises:
            NotFoundError: If the user does not exist.
        """
        return await self.storage.get_readings(user_id)

    async def update_reading(self, user_id: int, juz_number: int, is_completed: bool) -> ReadingRecord:
        """Set one reading's completion flag. Leaves other readings and the count alone.

        Raises:
            ValidationError: If juz_number or is_completed is malformed.
            NotFoundError: If the user does not exist.
        """
        validate_reading_update(juz_number, is_completed)
        reading = await self.storage.upsert_reading(user_id, juz_number, is_completed)
        logger.info("reading_updated", user_id=user_id, juz_number=juz_number, is_completed=is_completed)
        return reading

    async def complete_khatmah(self, user_id: int) -> int:
        """Finish the current cycle: reset all readings and increment the count.

        Returns the user's new completed-cycle count.

        Raises:
            IncompletePrerequisiteError: If fewer than 30 parts are complete. Nothing is mutated.
            NotFoundError: If the user does not exist.
        """
        readings = await self.storage.get_readings(user_id)
        completed = sum(1 for r in readings if r.is_completed)
        if completed < TOTAL_JUZ:
            logger.info("khatmah_incomplete", user_id=user_id, completed_parts=completed)
            raise IncompletePrerequisiteError(completed)

        new_count = await self.storage.reset_readings_and_increment(user_id)
        logger.info("khatmah_completed", user_id=user_id, khatmah_count=new_count)
        return new_count

    async def get_progress(self, user_id: int) -> ProgressSummary:
        """Summarize the current cycle for a user."""
        user = await self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError(user_id)
        readings = await self.storage.get_readings(user_id)
        completed = sum(1 for r in readings if r.is_completed)
        return ProgressSummary(
            completed_parts=completed,
            total_parts=TOTAL_JUZ,
            percent_complete=round(completed / TOTAL_JUZ * 100, 1),
            khatmah_count=user.khatmah_count,
        )
