"""Security headers middleware.

Learn: The API only ever answers with JSON, so every response can carry
a locked-down policy:
- X-Content-Type-Options / Content-Security-Policy: the body is data,
  never something a browser should sniff, render or run
- X-Frame-Options: nothing here belongs in a frame
- Referrer-Policy: limits referrer info leakage
- Cache-Control on /ops responses: they carry tokens and per-user views,
  so shared caches must not keep them
- Strict-Transport-Security: only on HTTPS connections
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from deepthoughts.middleware.request_id import OPS_PREFIX

STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Referrer-Policy": "no-referrer",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, hsts_max_age: int = 31536000):
        super().__init__(app)
        self.hsts_max_age = hsts_max_age

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        for name, value in STATIC_HEADERS.items():
            response.headers[name] = value

        if request.url.path.startswith(OPS_PREFIX):
            response.headers["Cache-Control"] = "no-store"

        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                f"max-age={self.hsts_max_age}; includeSubDomains"
            )
        return response
