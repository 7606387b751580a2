"""Thought service — posting, listing and reacting to thoughts."""

from typing import Optional

import structlog

from deepthoughts.auth.context import RequestContext
from deepthoughts.auth.gate import require_identity
from deepthoughts.schemas.thought import ThoughtRead
from deepthoughts.services import timestamp
from deepthoughts.store.base import DocumentStore, new_id

logger = structlog.get_logger()


class ThoughtService:
    """Business logic for thoughts and their reactions."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_thoughts(self, username: Optional[str] = None) -> list[ThoughtRead]:
        """All thoughts (or one author's), newest first."""
        filter = {"username": username} if username else {}
        docs = await self.store.thoughts.find(filter, sort=[("created_at", -1)])
        return [ThoughtRead.model_validate(d) for d in docs]

    async def get_thought(self, thought_id: str) -> Optional[ThoughtRead]:
        doc = await self.store.thoughts.find_one({"id": thought_id})
        return ThoughtRead.model_validate(doc) if doc else None

    async def add_thought(self, ctx: RequestContext, thought_text: str) -> ThoughtRead:
        """Post a thought as the caller and link it from their profile.

        Learn: Two single-document writes — create the thought, then push
        its id onto the author's `thoughts` list. Each is atomic on its own;
        there is no cross-document transaction.
        """
        identity = require_identity(ctx)
        doc = await self.store.thoughts.create(
            {
                "thought_text": thought_text,
                "username": identity.username,
                "created_at": timestamp(),
                "reactions": [],
            }
        )
        await self.store.users.update_by_id(
            identity.id, {"$push": {"thoughts": doc["id"]}}, new=True
        )
        logger.info("thought.created", thought_id=doc["id"], username=identity.username)
        return ThoughtRead.model_validate(doc)

    async def add_reaction(
        self, ctx: RequestContext, thought_id: str, reaction_body: str
    ) -> Optional[ThoughtRead]:
        """Append a reaction and return the updated parent thought.

        Returning the whole thought (not the bare reaction) lets clients
        fold the result straight into any cached view of that thought.
        None if the thought doesn't exist.
        """
        identity = require_identity(ctx)
        reaction = {
            "id": new_id(),
            "reaction_body": reaction_body,
            "username": identity.username,
            "created_at": timestamp(),
        }
        doc = await self.store.thoughts.find_one_and_update(
            {"id": thought_id}, {"$push": {"reactions": reaction}}, new=True
        )
        if doc is None:
            return None
        logger.info("reaction.created", thought_id=thought_id, username=identity.username)
        return ThoughtRead.model_validate(doc)
