"""Test fixtures — a fresh in-memory document store per test.

Learn: Tests drive the real FastAPI app through httpx's ASGITransport.
The app's get_store dependency is overridden with a new
InMemoryDocumentStore for every test, so there is no cross-test state and
no database to start. The lifespan doesn't run under ASGITransport, which
also means Redis is never initialized and rate limiting is skipped.

bcrypt's work factor is dropped to the minimum before anything imports
the settings singleton — hashing at 12 rounds would dominate the run.
"""

import os

os.environ.setdefault("DEEPTHOUGHTS_BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEEPTHOUGHTS_DATABASE_URL", "memory://")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from deepthoughts.api.deps import get_store  # noqa: E402
from deepthoughts.main import app  # noqa: E402
from deepthoughts.store.memory import InMemoryDocumentStore  # noqa: E402


@pytest_asyncio.fixture()
async def store():
    return InMemoryDocumentStore()


@pytest_asyncio.fixture()
async def client(store):
    """HTTP client bound to the app, backed by the per-test store."""
    app.dependency_overrides[get_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def call(client):
    """Run one operation: await call("addThought", {"thoughtText": "hi"}, token=t)."""

    async def _call(name, variables=None, token=None, **kwargs):
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await client.post(
            f"/api/v1/ops/{name}",
            json={"variables": variables or {}},
            headers=headers,
            **kwargs,
        )

    return _call


@pytest_asyncio.fixture()
async def signup(call):
    """Create an account, returning (token, user) from addUser."""

    async def _signup(username, password="password123"):
        r = await call(
            "addUser",
            {"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert r.status_code == 200, r.text
        payload = r.json()["data"]["addUser"]
        return payload["token"], payload["user"]

    return _signup
