"""Shared FastAPI dependencies."""

from fastapi import Request

from deepthoughts.store.base import DocumentStore


def get_store(request: Request) -> DocumentStore:
    """The document store opened in the app lifespan.

    Tests override this with a fresh in-memory store.
    """
    return request.app.state.store
