"""Async SQLAlchemy engine and per-request sessions for the SQL storage backend."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from khatmah.db.models import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_NOT_INITIALIZED = "Database not initialized. Call init_db() first."


def _engine_options(url: str) -> dict[str, Any]:
    """Pool settings for PostgreSQL; SQLite (tests, local dev) keeps the driver defaults."""
    if url.startswith("sqlite"):
        return {"echo": False}
    return {
        "echo": False,
        "pool_size": 20,
        "max_overflow": 10,
        "pool_pre_ping": True,
        # pgbouncer in transaction mode cannot hold prepared statements.
        "connect_args": {"statement_cache_size": 0},
    }


async def init_db(url: str) -> None:
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(url, **_engine_options(url))
    # Storage records are built after commit, so attributes must stay loaded.
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


async def create_tables() -> None:
    """Create the schema straight from the models. Alembic owns PostgreSQL schemas."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session; SqlStorage decides when to commit or roll back."""
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    async with _session_factory() as session:
        yield session
