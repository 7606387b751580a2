"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: There is no router-level auth. Identity is resolved per request
inside the operations route and enforced per operation, because public
reads must work for anonymous callers on the same endpoint as mutations.
"""

from fastapi import APIRouter

from deepthoughts.api.health import router as health_router
from deepthoughts.api.ops import router as ops_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(ops_router, tags=["operations"])
