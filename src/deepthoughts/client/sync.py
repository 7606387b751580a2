"""Cache synchronizer — fold a mutation's result into every affected view.

Learn: One write is often visible through several independently fetched
views. Posting a thought shows up in the global feed, the author's feed,
"me" and the author's profile. Refetching all of them costs a round trip
each; instead every mutation has an ordered list of (view key, merge)
pairs and the synchronizer patches each cached view in place.

Each pair is its own failure boundary:
- a view that was never fetched (ViewNotCached) is skipped, not created
- a merge that blows up is logged and skipped
and neither stops the remaining views from being updated. Concurrent
writes from one client are not coordinated: last write wins per view.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

from deepthoughts.client.cache import ViewCache, ViewKey, ViewNotCached, view_key

logger = structlog.get_logger()

Entity = dict[str, Any]


@dataclass(frozen=True)
class ViewUpdate:
    """Where a mutation result lands and how it merges into that view."""

    key: Callable[[Entity], ViewKey]
    merge: Callable[[Any, Entity], Any]


# ─── Merge functions ────────────────────────────────────
# Each takes (current snapshot, mutation result) and returns the new snapshot.


def prepend_thought(feed: list[Entity], thought: Entity) -> list[Entity]:
    """Feeds are newest first."""
    return [thought] + [t for t in feed if t["id"] != thought["id"]]


def append_profile_thought(profile: Entity, thought: Entity) -> Entity:
    """Profiles list thoughts in posting order."""
    profile["thoughts"] = [t for t in profile["thoughts"] if t["id"] != thought["id"]] + [thought]
    return profile


def replace_thought(feed: list[Entity], thought: Entity) -> list[Entity]:
    return [thought if t["id"] == thought["id"] else t for t in feed]


def replace_single(current: Any, entity: Entity) -> Entity:
    return entity


def replace_profile_thought(profile: Entity, thought: Entity) -> Entity:
    profile["thoughts"] = replace_thought(profile["thoughts"], thought)
    return profile


def replace_friends(profile: Entity, user: Entity) -> Entity:
    profile["friends"] = user["friends"]
    profile["friendCount"] = user["friendCount"]
    return profile


def replace_user(users: list[Entity], user: Entity) -> list[Entity]:
    return [user if u["id"] == user["id"] else u for u in users]


DEFAULT_RULES: dict[str, list[ViewUpdate]] = {
    "addThought": [
        ViewUpdate(lambda t: view_key("thoughts"), prepend_thought),
        ViewUpdate(lambda t: view_key("thoughts", username=t["username"]), prepend_thought),
        ViewUpdate(lambda t: view_key("me"), append_profile_thought),
        ViewUpdate(lambda t: view_key("user", username=t["username"]), append_profile_thought),
    ],
    "addReaction": [
        ViewUpdate(lambda t: view_key("thought", id=t["id"]), replace_single),
        ViewUpdate(lambda t: view_key("thoughts"), replace_thought),
        ViewUpdate(lambda t: view_key("thoughts", username=t["username"]), replace_thought),
        ViewUpdate(lambda t: view_key("me"), replace_profile_thought),
        ViewUpdate(lambda t: view_key("user", username=t["username"]), replace_profile_thought),
    ],
    "addFriend": [
        ViewUpdate(lambda u: view_key("me"), replace_friends),
        ViewUpdate(lambda u: view_key("user", username=u["username"]), replace_friends),
        ViewUpdate(lambda u: view_key("users"), replace_user),
    ],
}


class CacheSynchronizer:
    """Apply per-mutation view updates to a ViewCache."""

    def __init__(self, cache: ViewCache, rules: Optional[dict[str, list[ViewUpdate]]] = None):
        self.cache = cache
        self.rules = DEFAULT_RULES if rules is None else rules

    def apply(self, operation: str, result: Optional[Entity]) -> list[ViewKey]:
        """Fold `result` into every cached view `operation` affects.

        Returns the keys of the views that were actually updated.
        """
        if result is None:
            return []

        updated = []
        for update in self.rules.get(operation, []):
            try:
                key = update.key(result)
                merged = update.merge(self.cache.read(key), copy.deepcopy(result))
            except ViewNotCached as e:
                logger.debug("cache.view_skipped", operation=operation, view=str(e))
                continue
            except Exception:
                logger.exception("cache.view_update_failed", operation=operation)
                continue
            self.cache.write(key, merged)
            updated.append(key)
        return updated
