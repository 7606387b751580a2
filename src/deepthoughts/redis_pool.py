"""Redis connection pool (used by the rate limiter).

Learn: Redis is optional. If init_redis() fails at startup the app runs
without rate limiting — get_redis() raises and callers skip their work.
"""

from typing import Optional

import redis.asyncio as aioredis

from deepthoughts.config import settings

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis() -> aioredis.Redis:
    """Initialize the Redis connection pool."""
    global _redis
    _redis = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    try:
        # Verify connection
        await _redis.ping()
    except Exception:
        await close_redis()
        raise
    return _redis


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
