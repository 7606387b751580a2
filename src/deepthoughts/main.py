"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (document store, Redis).
Middleware, CORS, exception handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deepthoughts import __version__
from deepthoughts.api import api_router
from deepthoughts.api.error_handling import register_exception_handlers
from deepthoughts.config import settings
from deepthoughts.middleware.rate_limit import RateLimitMiddleware
from deepthoughts.middleware.request_id import RequestIdMiddleware
from deepthoughts.middleware.security import SecurityHeadersMiddleware
from deepthoughts.redis_pool import close_redis, init_redis
from deepthoughts.store import DocumentStore, create_store

logger = structlog.get_logger()


def build_lifespan(store: DocumentStore):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown lifecycle.

        Learn: Anything before `yield` runs at startup, after `yield` runs
        at shutdown.
        """
        logger.info(
            "deepthoughts.starting",
            version=__version__,
            environment=settings.environment,
            port=settings.port,
        )

        await store.connect()

        try:
            await init_redis()
            logger.info("deepthoughts.redis_connected", url=settings.redis_url)
        except Exception as e:
            logger.warning("deepthoughts.redis_unavailable", error=str(e))
            # Redis is optional — app works without rate limiting

        yield

        logger.info("deepthoughts.shutdown")
        await close_redis()
        await store.close()

    return lifespan


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    store = store or create_store(settings.database_url)
    app = FastAPI(
        title="Deep Thoughts",
        description="Post thoughts, react to them, keep a friend list",
        version=__version__,
        lifespan=build_lifespan(store),
    )
    app.state.store = store

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: deepthoughts.main:app)
app = create_app()
