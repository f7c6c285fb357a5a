"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from khatmah.auth.router import router as auth_router
from khatmah.config import get_settings
from khatmah.database import close_db, create_tables, init_db
from khatmah.dependencies import get_storage
from khatmah.errors import KhatmahError
from khatmah.health.router import router as health_router
from khatmah.leaderboard.router import router as leaderboard_router
from khatmah.middleware import setup_middleware
from khatmah.progress.router import router as progress_router
from khatmah.redis_client import close_redis, init_redis
from khatmah.seed import seed_sample_data

logger = structlog.get_logger()


async def _bootstrap() -> None:
    """Seed sample users on an empty install. Failures are logged, never fatal."""
    try:
        async for storage in get_storage():
            await seed_sample_data(storage)
    except KhatmahError:
        logger.warning("seed_failed", exc_info=True)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    if settings.storage_backend == "sql":
        await init_db(settings.database_url)
        if settings.database_url.startswith("sqlite"):
            await create_tables()
    await init_redis(settings.redis_url)

    if settings.seed_on_startup:
        await _bootstrap()

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Khatmah Tracker API",
        description="Track reading progress through the 30 juz and compete on completed Khatmahs",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(progress_router)
    app.include_router(leaderboard_router)

    return app


app = create_app()
