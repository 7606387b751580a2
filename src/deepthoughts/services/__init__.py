"""Service layer — business logic for users, thoughts and reactions.

Learn: API operations call services, services call the document store.
Every mutating method that needs an actor takes the RequestContext and
passes it through auth.gate.require_identity before touching storage.
"""

from datetime import datetime, timezone


def timestamp() -> str:
    """Current UTC time as an ISO-8601 string (sortable, JSON-safe)."""
    return datetime.now(timezone.utc).isoformat()
