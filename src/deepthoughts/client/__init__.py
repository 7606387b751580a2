"""Python client for the Deep Thoughts API.

Learn: Queries populate a local ViewCache; mutations fold their result
into every cached view they affect (CacheSynchronizer) instead of
refetching. AuthSession keeps the token between calls.
"""

from deepthoughts.client.api import ApiError, DeepThoughtsClient
from deepthoughts.client.cache import ViewCache, ViewNotCached, view_key
from deepthoughts.client.session import AuthSession
from deepthoughts.client.sync import CacheSynchronizer

__all__ = [
    "ApiError",
    "AuthSession",
    "CacheSynchronizer",
    "DeepThoughtsClient",
    "ViewCache",
    "ViewNotCached",
    "view_key",
]
