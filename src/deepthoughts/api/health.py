"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and dependencies (document store, Redis) are reachable.
"""

from fastapi import APIRouter, Depends

from deepthoughts import __version__
from deepthoughts.api.deps import get_store
from deepthoughts.redis_pool import get_redis
from deepthoughts.store.base import DocumentStore

router = APIRouter()


@router.get("/health")
async def health_check(store: DocumentStore = Depends(get_store)):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    checks["store"] = "ok" if await store.ping() else "error"

    # Redis is optional — only rate limiting depends on it
    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"unavailable: {e}"

    status = "healthy" if checks["store"] == "ok" else "degraded"
    return {"status": status, **checks}
