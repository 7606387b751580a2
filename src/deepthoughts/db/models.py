"""SQLAlchemy ORM models backing the SQL document store.

Learn: Rather than one table per entity, documents live as JSON bodies in a
single `documents` table, partitioned by `collection`. That keeps the
storage contract identical to the in-memory store (arrays of ids, embedded
reactions) while still getting transactions and row locks from the database.

Uniqueness (username, email) can't be expressed as a constraint on a JSON
field portably, so each unique value gets a row in `unique_keys` whose
primary key is (collection, field, value). A duplicate insert fails with
IntegrityError inside the same transaction as the document insert.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, ForeignKey, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredDocument(Base):
    """One document of one collection."""

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    collection: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    body: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )


class UniqueKey(Base):
    """Claim on a unique field value, e.g. ("users", "email", "a@b.co")."""

    __tablename__ = "unique_keys"

    collection: Mapped[str] = mapped_column(String(50), primary_key=True)
    field: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), primary_key=True)
    document_id: Mapped[str] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
