"""Health, readiness, and version endpoints."""

from fastapi import APIRouter
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from khatmah.config import get_settings
from khatmah.database import get_session
from khatmah.redis_client import get_redis, redis_enabled

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe — returns 200 if the process is alive."""
    return {"status": "healthy"}


async def _check_database() -> str:
    if get_settings().storage_backend == "memory":
        return "ok"
    try:
        async for db in get_session():
            result = await db.execute(text("SELECT 1"))
            result.scalar()
    except (SQLAlchemyError, RuntimeError, OSError) as exc:
        return f"error: {exc}"
    return "ok"


async def _check_redis() -> str:
    if not redis_enabled():
        return "disabled"
    try:
        await get_redis().ping()
    except (RedisError, OSError) as exc:
        return f"error: {exc}"
    return "ok"


@router.get("/ready")
async def readiness() -> dict[str, object]:
    """Readiness probe — checks storage and (when configured) Redis."""
    checks: dict[str, object] = {
        "database": await _check_database(),
        "redis": await _check_redis(),
    }
    all_ok = all(v in ("ok", "disabled") for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
