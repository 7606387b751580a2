"""Rate limiting middleware — per-IP, per-minute counters in Redis.

Learn: Counters live under "deepthoughts:rl:{ip}:{bucket}:{minute}".
Credential operations (login, addUser) each get their own bucket with
the stricter auth budget, so password guessing against login can't be
hidden inside general read traffic and doesn't eat into signups. Every
other request shares the "api" bucket.

If Redis was never initialized (tests, dev without Redis) or errors
mid-request, the request goes through unlimited.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from deepthoughts.middleware.request_id import operation_name
from deepthoughts.redis_pool import get_redis

logger = structlog.get_logger()

CREDENTIAL_OPERATIONS = frozenset({"login", "addUser"})

WINDOW_SECONDS = 60


def bucket_for(path: str) -> str:
    operation = operation_name(path)
    return operation if operation in CREDENTIAL_OPERATIONS else "api"


def rate_limited() -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "errors": [
                {"message": "Rate limit exceeded. Try again later.", "code": "RATE_LIMITED"}
            ]
        },
        headers={"Retry-After": str(WINDOW_SECONDS)},
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed one-minute window per client IP and bucket."""

    def __init__(self, app, default_rpm: int = 100, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        bucket = bucket_for(request.url.path)
        rpm = self.default_rpm if bucket == "api" else self.auth_rpm
        window = int(time.time() // WINDOW_SECONDS)
        key = f"deepthoughts:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS * 2)
        except Exception as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.warning("rate_limit.exceeded", client_ip=client_ip, bucket=bucket)
            return rate_limited()

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
