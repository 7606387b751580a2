"""In-memory document store for development and tests.

Learn: Every method body runs without an await, so within one event loop
each call is atomic — no locks needed. Documents are deep-copied on the
way in and out so callers never share state with the store.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from deepthoughts.store.base import (
    Collection,
    Document,
    DocumentStore,
    Filter,
    Sort,
    apply_patch,
    matches,
    new_id,
    sort_documents,
)
from deepthoughts.store.errors import DuplicateKeyError


class InMemoryCollection(Collection):
    def __init__(self, name: str):
        self.name = name
        self._docs: dict[str, Document] = {}

    def _check_unique(self, doc: Document, exclude_id: Optional[str] = None) -> None:
        for field in self.unique_fields():
            value = doc.get(field)
            if value is None:
                continue
            for other in self._docs.values():
                if other["id"] != exclude_id and other.get(field) == value:
                    raise DuplicateKeyError(self.name, field)

    async def find_one(self, filter: Filter) -> Optional[Document]:
        for doc in self._docs.values():
            if matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def find(self, filter: Optional[Filter] = None, sort: Optional[Sort] = None) -> list[Document]:
        found = [copy.deepcopy(d) for d in self._docs.values() if matches(d, filter)]
        return sort_documents(found, sort)

    async def create(self, fields: Document) -> Document:
        doc = copy.deepcopy(fields)
        doc.setdefault("id", new_id())
        if doc["id"] in self._docs:
            raise DuplicateKeyError(self.name, "id")
        self._check_unique(doc)
        self._docs[doc["id"]] = doc
        return copy.deepcopy(doc)

    async def find_one_and_update(
        self, filter: Filter, patch: dict[str, dict[str, Any]], new: bool = True
    ) -> Optional[Document]:
        for doc_id, doc in self._docs.items():
            if matches(doc, filter):
                updated = apply_patch(doc, patch)
                self._check_unique(updated, exclude_id=doc_id)
                self._docs[doc_id] = updated
                return copy.deepcopy(updated if new else doc)
        return None


class InMemoryDocumentStore(DocumentStore):
    def __init__(self):
        self.users = InMemoryCollection("users")
        self.thoughts = InMemoryCollection("thoughts")

    async def ping(self) -> bool:
        return True
