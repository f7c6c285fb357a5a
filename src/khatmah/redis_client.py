"""Optional Redis client. Only the rate limiter and the readiness probe use it."""

import redis.asyncio as redis

_pool: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Connect lazily to ``url``. An empty URL leaves Redis switched off."""
    global _pool  # noqa: PLW0603
    _pool = None
    if url:
        _pool = redis.from_url(url, encoding="utf-8", decode_responses=True, max_connections=20)  # type: ignore[no-untyped-call]


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
    _pool = None


def redis_enabled() -> bool:
    return _pool is not None


def get_redis() -> redis.Redis:
    """The shared client. RuntimeError when Redis is off or not yet initialized."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool
