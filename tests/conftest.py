"""Shared test fixtures.

Everything runs against throwaway SQLite databases (aiosqlite) or the
in-memory backend, so no PostgreSQL or Redis is required.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from khatmah.config import get_settings
from khatmah.database import close_db, create_tables, get_session, init_db
from khatmah.dependencies import reset_memory_storage
from khatmah.main import create_app
from khatmah.storage.interface import KhatmahStorage
from khatmah.storage.memory import MemoryStorage
from khatmah.storage.sql import SqlStorage

TEST_PASSWORD = "Bismillah123"  # noqa: S105


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'khatmah.db'}"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, sqlite_url: str):
    """Point settings at a per-test SQLite file and keep Redis and seeding off."""
    monkeypatch.setenv("KHATMAH_DATABASE_URL", sqlite_url)
    monkeypatch.setenv("KHATMAH_STORAGE_BACKEND", "sql")
    monkeypatch.setenv("KHATMAH_REDIS_URL", "")
    monkeypatch.setenv("KHATMAH_SEED_ON_STARTUP", "false")
    monkeypatch.setenv("KHATMAH_LOG_FORMAT", "console")
    get_settings.cache_clear()
    reset_memory_storage()
    yield
    get_settings.cache_clear()
    reset_memory_storage()


@pytest_asyncio.fixture
async def database(sqlite_url: str) -> AsyncGenerator[None, None]:
    """Initialise the engine on the per-test database and create the schema."""
    await init_db(sqlite_url)
    await create_tables()
    yield
    await close_db()


@pytest_asyncio.fixture
async def sql_storage(database: None) -> AsyncGenerator[SqlStorage, None]:
    async for session in get_session():
        yield SqlStorage(session)


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def storage(request: pytest.FixtureRequest, sqlite_url: str) -> AsyncGenerator[KhatmahStorage, None]:
    """Run the same test over both storage backends."""
    if request.param == "memory":
        yield MemoryStorage()
        return
    await init_db(sqlite_url)
    await create_tables()
    async for session in get_session():
        yield SqlStorage(session)
    await close_db()


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against a fresh app on the per-test database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Register through the API and return the token response body."""

    async def _register(username: str, password: str = TEST_PASSWORD, **extra: object) -> dict:
        response = await client.post("/api/register", json={"username": username, "password": password, **extra})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest_asyncio.fixture
async def registered_user(register: Callable[..., Awaitable[dict]]) -> dict:
    """Register 'ahmed'. Returns the token response body."""
    return await register("ahmed", displayName="Ahmed Ali")


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    """Client carrying ahmed's bearer token."""
    client.headers["Authorization"] = f"Bearer {registered_user['accessToken']}"
    return client
