"""Storage abstraction layer.

All persistence goes through these interfaces, so the in-memory store
(dev/tests) and the SQL store are interchangeable.

Filters are dicts of field → value (equality) or field → {"$in": [...]}.
Patches support three operators:
    {"$set": {field: value}}        overwrite a field
    {"$push": {field: value}}       append to a list field
    {"$addToSet": {field: value}}   append unless already present
"""

from __future__ import annotations

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

Document = dict[str, Any]
Filter = dict[str, Any]
Sort = list[tuple[str, int]]

# Fields that must be unique per collection.
UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {
    "users": ("username", "email"),
    "thoughts": (),
}


def new_id() -> str:
    return uuid.uuid4().hex


def matches(doc: Document, filter: Optional[Filter]) -> bool:
    """Check a document against an equality / $in filter."""
    for field, expected in (filter or {}).items():
        value = doc.get(field)
        if isinstance(expected, dict):
            if "$in" not in expected:
                raise ValueError(f"Unsupported filter operator on {field!r}: {expected}")
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


def apply_patch(doc: Document, patch: dict[str, dict[str, Any]]) -> Document:
    """Return a patched copy of `doc`. The input is left untouched."""
    updated = copy.deepcopy(doc)
    for op, fields in patch.items():
        for field, value in fields.items():
            if field == "id":
                raise ValueError("Document id is immutable")
            if op == "$set":
                updated[field] = copy.deepcopy(value)
            elif op == "$push":
                updated.setdefault(field, []).append(copy.deepcopy(value))
            elif op == "$addToSet":
                items = updated.setdefault(field, [])
                if value not in items:
                    items.append(copy.deepcopy(value))
            else:
                raise ValueError(f"Unsupported update operator: {op}")
    return updated


def sort_documents(docs: list[Document], sort: Optional[Sort]) -> list[Document]:
    # Apply keys in reverse so the first key is the primary order.
    for field, direction in reversed(sort or []):
        docs = sorted(docs, key=lambda d: d.get(field) or "", reverse=direction < 0)
    return docs


class Collection(ABC):
    """One named collection of documents keyed by "id"."""

    name: str

    @abstractmethod
    async def find_one(self, filter: Filter) -> Optional[Document]:
        """Return the first matching document, or None."""

    @abstractmethod
    async def find(self, filter: Optional[Filter] = None, sort: Optional[Sort] = None) -> list[Document]:
        """Return every matching document."""

    @abstractmethod
    async def create(self, fields: Document) -> Document:
        """Insert a document (an "id" is assigned if missing) and return it.

        Raises DuplicateKeyError if a unique field collides.
        """

    @abstractmethod
    async def find_one_and_update(
        self, filter: Filter, patch: dict[str, dict[str, Any]], new: bool = True
    ) -> Optional[Document]:
        """Atomically patch the first matching document.

        Returns the document after the update when `new` is true, before it
        otherwise; None if nothing matched.
        """

    async def update_by_id(
        self, id: str, patch: dict[str, dict[str, Any]], new: bool = True
    ) -> Optional[Document]:
        return await self.find_one_and_update({"id": id}, patch, new=new)

    def unique_fields(self) -> tuple[str, ...]:
        return UNIQUE_FIELDS.get(self.name, ())


class DocumentStore(ABC):
    """The persistence collaborator consumed by the services."""

    users: Collection
    thoughts: Collection

    async def connect(self) -> None:
        """Open connections / create schema. No-op by default."""

    async def close(self) -> None:
        """Release connections. No-op by default."""

    @abstractmethod
    async def ping(self) -> bool:
        """Report whether the backend is reachable."""
