"""SQL-backed document store (PostgreSQL in production, SQLite in tests).

Learn: Each collection call opens its own session and transaction:
- create() inserts the document and its unique-key claims together, so a
  duplicate username/email rolls the whole insert back.
- find_one_and_update() loads the row with SELECT ... FOR UPDATE (ignored
  by SQLite, which serializes writers anyway), applies the patch in Python
  and writes the new body back before committing.

Filters compile to JSON field lookups: body["username"].as_string() works
on both PostgreSQL (->>) and SQLite (json_extract). Filter values are
compared as strings.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

import structlog
from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from deepthoughts.db.engine import make_engine, make_session_factory
from deepthoughts.db.models import Base, StoredDocument, UniqueKey
from deepthoughts.store.base import (
    Collection,
    Document,
    DocumentStore,
    Filter,
    Sort,
    apply_patch,
    new_id,
)
from deepthoughts.store.errors import DuplicateKeyError

logger = structlog.get_logger()


class SqlCollection(Collection):
    def __init__(self, name: str, sessions: async_sessionmaker[AsyncSession]):
        self.name = name
        self._sessions = sessions

    def _column(self, field: str):
        if field == "id":
            return StoredDocument.id
        return StoredDocument.body[field].as_string()

    def _where(self, filter: Optional[Filter]) -> list:
        clauses = [StoredDocument.collection == self.name]
        for field, expected in (filter or {}).items():
            column = self._column(field)
            if isinstance(expected, dict):
                if "$in" not in expected:
                    raise ValueError(f"Unsupported filter operator on {field!r}: {expected}")
                clauses.append(column.in_([str(v) for v in expected["$in"]]))
            else:
                clauses.append(column == str(expected))
        return clauses

    async def _flush_or_conflict(self, session: AsyncSession, field: str) -> None:
        try:
            await session.flush()
        except IntegrityError:
            raise DuplicateKeyError(self.name, field) from None

    async def find_one(self, filter: Filter) -> Optional[Document]:
        async with self._sessions() as session:
            result = await session.execute(
                select(StoredDocument).where(*self._where(filter)).limit(1)
            )
            row = result.scalars().first()
            return copy.deepcopy(row.body) if row else None

    async def find(self, filter: Optional[Filter] = None, sort: Optional[Sort] = None) -> list[Document]:
        q = select(StoredDocument).where(*self._where(filter))
        for field, direction in sort or []:
            column = self._column(field)
            q = q.order_by(column.desc() if direction < 0 else column.asc())
        if not sort:
            q = q.order_by(StoredDocument.created_at)
        async with self._sessions() as session:
            result = await session.execute(q)
            return [copy.deepcopy(row.body) for row in result.scalars().all()]

    async def create(self, fields: Document) -> Document:
        doc = copy.deepcopy(fields)
        doc.setdefault("id", new_id())
        async with self._sessions() as session:
            async with session.begin():
                session.add(StoredDocument(id=doc["id"], collection=self.name, body=doc))
                await self._flush_or_conflict(session, "id")
                for field in self.unique_fields():
                    if doc.get(field) is None:
                        continue
                    session.add(
                        UniqueKey(
                            collection=self.name,
                            field=field,
                            value=str(doc[field]),
                            document_id=doc["id"],
                        )
                    )
                    await self._flush_or_conflict(session, field)
        return copy.deepcopy(doc)

    async def find_one_and_update(
        self, filter: Filter, patch: dict[str, dict[str, Any]], new: bool = True
    ) -> Optional[Document]:
        async with self._sessions() as session:
            async with session.begin():
                result = await session.execute(
                    select(StoredDocument)
                    .where(*self._where(filter))
                    .limit(1)
                    .with_for_update()
                )
                row = result.scalars().first()
                if row is None:
                    return None

                before = copy.deepcopy(row.body)
                after = apply_patch(before, patch)
                for field in self.unique_fields():
                    if before.get(field) == after.get(field):
                        continue
                    await session.execute(
                        delete(UniqueKey).where(
                            UniqueKey.collection == self.name,
                            UniqueKey.field == field,
                            UniqueKey.document_id == row.id,
                        )
                    )
                    if after.get(field) is not None:
                        session.add(
                            UniqueKey(
                                collection=self.name,
                                field=field,
                                value=str(after[field]),
                                document_id=row.id,
                            )
                        )
                        await self._flush_or_conflict(session, field)
                row.body = after
        return copy.deepcopy(after if new else before)


class SqlDocumentStore(DocumentStore):
    def __init__(self, database_url: str, echo: bool = False):
        self.engine = make_engine(database_url, echo=echo)
        sessions = make_session_factory(self.engine)
        self.users = SqlCollection("users", sessions)
        self.thoughts = SqlCollection("thoughts", sessions)

    async def connect(self) -> None:
        """Create tables if they don't exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("store.sql_connected", dialect=self.engine.dialect.name)

    async def close(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("store.ping_failed", error=str(e))
            return False
