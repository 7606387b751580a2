"""User service — accounts, login, profiles and friends.

Learn: Stored user documents keep references, not copies: `thoughts` is
a list of thought ids and `friends` a list of user ids. Reads resolve
them with one batched $in lookup per kind (the "populate" step), so a
list of N users costs three queries, not 2N+1.
"""

from typing import Optional

import structlog

from deepthoughts.auth.context import RequestContext
from deepthoughts.auth.gate import require_identity
from deepthoughts.auth.jwt import IdentityAssertion, sign_token
from deepthoughts.auth.password import hash_password, needs_rehash, verify_password
from deepthoughts.errors import InvalidCredentials
from deepthoughts.schemas.thought import ThoughtRead
from deepthoughts.schemas.user import AuthPayload, UserRead, UserSummary
from deepthoughts.services import timestamp
from deepthoughts.store.base import Document, DocumentStore

logger = structlog.get_logger()


def identity_of(doc: Document) -> IdentityAssertion:
    return IdentityAssertion(id=doc["id"], username=doc["username"], email=doc["email"])


class UserService:
    """Business logic for user accounts."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def resolve(self, docs: list[Document]) -> list[UserRead]:
        """Turn stored user documents into fully populated UserRead models."""
        thought_ids = {tid for d in docs for tid in d.get("thoughts", [])}
        friend_ids = {fid for d in docs for fid in d.get("friends", [])}

        thoughts = {}
        if thought_ids:
            found = await self.store.thoughts.find({"id": {"$in": sorted(thought_ids)}})
            thoughts = {t["id"]: t for t in found}
        friends = {}
        if friend_ids:
            found = await self.store.users.find({"id": {"$in": sorted(friend_ids)}})
            friends = {f["id"]: f for f in found}

        # Dangling references are dropped.
        return [
            UserRead(
                id=d["id"],
                username=d["username"],
                email=d["email"],
                thoughts=[
                    ThoughtRead.model_validate(thoughts[tid])
                    for tid in d.get("thoughts", [])
                    if tid in thoughts
                ],
                friends=[
                    UserSummary.model_validate(friends[fid])
                    for fid in d.get("friends", [])
                    if fid in friends
                ],
            )
            for d in docs
        ]

    async def _resolve_one(self, doc: Optional[Document]) -> Optional[UserRead]:
        if doc is None:
            return None
        return (await self.resolve([doc]))[0]

    # ─── Reads ──────────────────────────────────────────

    async def list_users(self) -> list[UserRead]:
        return await self.resolve(await self.store.users.find())

    async def get_user(self, username: str) -> Optional[UserRead]:
        return await self._resolve_one(await self.store.users.find_one({"username": username}))

    async def me(self, ctx: RequestContext) -> Optional[UserRead]:
        identity = require_identity(ctx)
        return await self._resolve_one(await self.store.users.find_one({"id": identity.id}))

    # ─── Accounts ───────────────────────────────────────

    async def add_user(self, username: str, email: str, password: str) -> AuthPayload:
        """Create an account and sign the caller in.

        Duplicate usernames/emails surface as the store's DuplicateKeyError.
        """
        doc = await self.store.users.create(
            {
                "username": username,
                "email": email.lower(),
                "password": hash_password(password),
                "thoughts": [],
                "friends": [],
                "created_at": timestamp(),
            }
        )
        logger.info("user.created", user_id=doc["id"], username=username)
        user = await self._resolve_one(doc)
        return AuthPayload(token=sign_token(identity_of(doc)), user=user)

    async def login(self, email: str, password: str) -> AuthPayload:
        """Email + password → token.

        Unknown email and wrong password raise the same InvalidCredentials.
        """
        doc = await self.store.users.find_one({"email": email.lower()})
        if not doc or not verify_password(password, doc.get("password", "")):
            logger.info("user.login_failed")
            raise InvalidCredentials()

        if needs_rehash(doc["password"]):
            await self.store.users.update_by_id(
                doc["id"], {"$set": {"password": hash_password(password)}}
            )
            logger.info("user.password_rehashed", user_id=doc["id"])

        logger.info("user.logged_in", user_id=doc["id"])
        user = await self._resolve_one(doc)
        return AuthPayload(token=sign_token(identity_of(doc)), user=user)

    # ─── Friends ────────────────────────────────────────

    async def add_friend(self, ctx: RequestContext, friend_id: str) -> Optional[UserRead]:
        """Add friend_id to the caller's friend set. Repeat adds are no-ops."""
        identity = require_identity(ctx)
        doc = await self.store.users.update_by_id(
            identity.id, {"$addToSet": {"friends": friend_id}}, new=True
        )
        logger.info("user.friend_added", user_id=identity.id, friend_id=friend_id)
        return await self._resolve_one(doc)
