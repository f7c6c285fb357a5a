"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from fastapi import Depends

from khatmah.config import get_settings
from khatmah.database import get_session
from khatmah.leaderboard.service import LeaderboardAggregator
from khatmah.progress.tracker import ProgressTracker
from khatmah.storage.interface import KhatmahStorage
from khatmah.storage.memory import MemoryStorage
from khatmah.storage.sql import SqlStorage

_memory_storage: MemoryStorage | None = None


def get_memory_storage() -> MemoryStorage:
    """Process-wide in-memory storage (created on first use)."""
    global _memory_storage  # noqa: PLW0603
    if _memory_storage is None:
        _memory_storage = MemoryStorage()
    return _memory_storage


def reset_memory_storage() -> None:
    """Drop the in-memory storage (useful for testing)."""
    global _memory_storage  # noqa: PLW0603
    _memory_storage = None


async def get_storage() -> AsyncGenerator[KhatmahStorage, None]:
    """Yield the configured storage backend (FastAPI dependency)."""
    if get_settings().storage_backend == "memory":
        yield get_memory_storage()
        return
    async for session in get_session():
        yield SqlStorage(session)


async def get_tracker(storage: KhatmahStorage = Depends(get_storage)) -> ProgressTracker:
    return ProgressTracker(storage)


async def get_aggregator(storage: KhatmahStorage = Depends(get_storage)) -> LeaderboardAggregator:
    return LeaderboardAggregator(storage)
