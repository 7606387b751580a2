"""Async HTTP client for the operations API.

Usage:
    async with DeepThoughtsClient("http://localhost:3001") as dt:
        await dt.login("ann@example.com", "secret")
        feed = await dt.thoughts()            # cached as view ("thoughts", ())
        await dt.add_thought("Hello there")   # feed view patched, no refetch

Learn: Queries write their result into the ViewCache under
view_key(operation, **variables). Mutations hand their result to the
CacheSynchronizer. Tokens go out as "Authorization: Bearer ...".
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from deepthoughts.client.cache import ViewCache, view_key
from deepthoughts.client.session import AuthSession
from deepthoughts.client.sync import CacheSynchronizer

logger = structlog.get_logger()

DEFAULT_API_URL = "http://localhost:3001"


class ApiError(Exception):
    """An error envelope returned by the server."""

    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class DeepThoughtsClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        session: Optional[AuthSession] = None,
        cache: Optional[ViewCache] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.session = session or AuthSession()
        self.cache = cache or ViewCache()
        self.sync = CacheSynchronizer(self.cache)
        self._http = http or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def __aenter__(self) -> "DeepThoughtsClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ─── Transport ──────────────────────────────────────

    async def _call(self, operation: str, variables: dict[str, Any]) -> Any:
        headers = {}
        token = self.session.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        r = await self._http.post(
            f"/api/v1/ops/{operation}",
            json={"variables": variables},
            headers=headers,
        )
        try:
            payload = r.json()
        except ValueError:
            raise ApiError(r.status_code, "HTTP_ERROR", r.text) from None

        if r.status_code >= 400 or payload.get("errors"):
            error = (payload.get("errors") or [{}])[0]
            raise ApiError(
                r.status_code,
                error.get("code", "HTTP_ERROR"),
                error.get("message", r.reason_phrase),
            )
        return payload["data"][operation]

    async def query(self, operation: str, **variables: Any) -> Any:
        """Run a query and cache its result as a view."""
        variables = {k: v for k, v in variables.items() if v is not None}
        data = await self._call(operation, variables)
        self.cache.write(view_key(operation, **variables), data)
        return data

    async def mutate(self, operation: str, **variables: Any) -> Any:
        """Run a mutation and fold its result into the cached views."""
        data = await self._call(operation, variables)
        updated = self.sync.apply(operation, data)
        logger.debug("client.views_updated", operation=operation, count=len(updated))
        return data

    # ─── Queries ────────────────────────────────────────

    async def thoughts(self, username: Optional[str] = None) -> list[dict]:
        return await self.query("thoughts", username=username)

    async def thought(self, thought_id: str) -> Optional[dict]:
        return await self.query("thought", id=thought_id)

    async def users(self) -> list[dict]:
        return await self.query("users")

    async def user(self, username: str) -> Optional[dict]:
        return await self.query("user", username=username)

    async def me(self) -> Optional[dict]:
        return await self.query("me")

    # ─── Mutations ──────────────────────────────────────

    async def add_user(self, username: str, email: str, password: str) -> dict:
        data = await self.mutate("addUser", username=username, email=email, password=password)
        self._switch_identity(data["token"])
        return data

    async def login(self, email: str, password: str) -> dict:
        data = await self.mutate("login", email=email, password=password)
        self._switch_identity(data["token"])
        return data

    def logout(self) -> None:
        """Forget the token and every cached view (they may be user-specific)."""
        self.session.logout()
        self.cache.clear()

    def _switch_identity(self, token: str) -> None:
        """Views cached under the previous identity (e.g. "me") no longer apply."""
        self.cache.clear()
        self.session.login(token)

    async def add_thought(self, thought_text: str) -> dict:
        return await self.mutate("addThought", thoughtText=thought_text)

    async def add_reaction(self, thought_id: str, reaction_body: str) -> Optional[dict]:
        return await self.mutate("addReaction", thoughtId=thought_id, reactionBody=reaction_body)

    async def add_friend(self, friend_id: str) -> Optional[dict]:
        return await self.mutate("addFriend", friendId=friend_id)
