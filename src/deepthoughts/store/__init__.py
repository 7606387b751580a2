"""Document storage.

Learn: Services never talk to a database directly. They get a
DocumentStore exposing two collections (users, thoughts), each with the
same small Mongo-flavoured contract: find_one, find, create,
update_by_id, find_one_and_update. Every call is atomic for the single
document it touches.

create_store() picks the backend from settings.database_url.
"""

from deepthoughts.store.base import Collection, DocumentStore
from deepthoughts.store.errors import DuplicateKeyError


def create_store(database_url: str) -> DocumentStore:
    """Build the store for a URL ("memory://" or any SQLAlchemy async URL)."""
    if database_url.startswith("memory://"):
        from deepthoughts.store.memory import InMemoryDocumentStore

        return InMemoryDocumentStore()

    from deepthoughts.store.sql import SqlDocumentStore

    return SqlDocumentStore(database_url)


__all__ = ["Collection", "DocumentStore", "DuplicateKeyError", "create_store"]
