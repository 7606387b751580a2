"""Request ID middleware — correlate every log line of one operation call.

Learn: The ID comes from an incoming X-Request-ID header or is minted
here, and is echoed back in the response. For POST /api/v1/ops/{name}
the operation name is bound too, so "auth.invalid_token" or
"user.login_failed" lines say which operation produced them. The
identity resolver later adds `username` to the same context when the
caller is authenticated.
"""

import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

OPS_PREFIX = "/api/v1/ops/"


def operation_name(path: str) -> Optional[str]:
    """The operation addressed by an ops path, or None for other routes."""
    if not path.startswith(OPS_PREFIX):
        return None
    return path[len(OPS_PREFIX):].strip("/") or None


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

        # Nothing leaks between requests
        structlog.contextvars.clear_contextvars()
        fields = {"request_id": request_id}
        operation = operation_name(request.url.path)
        if operation:
            fields["operation"] = operation
        structlog.contextvars.bind_contextvars(**fields)

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        if operation:
            response.headers["X-Operation"] = operation
        return response
