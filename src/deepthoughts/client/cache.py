"""Client-side cache of named read results ("views").

Learn: A view is the result of one query with one set of variables, e.g.
view_key("thoughts") for the global feed or view_key("user", username="ann")
for a profile. Views hold snapshots BY VALUE — every read and write
deep-copies — so two views containing the same thought are independent
copies and must each be patched.

Reading a view that was never fetched raises ViewNotCached rather than
returning an empty placeholder: "never populated" and "populated with
nothing" are different states.
"""

from __future__ import annotations

import copy
from typing import Any, Hashable

ViewKey = tuple[str, tuple[tuple[str, Hashable], ...]]


class ViewNotCached(KeyError):
    """The requested view has never been populated."""


def view_key(operation: str, **variables: Any) -> ViewKey:
    """Canonical key for a view. None-valued variables are dropped."""
    return operation, tuple(sorted((k, v) for k, v in variables.items() if v is not None))


class ViewCache:
    def __init__(self):
        self._views: dict[ViewKey, Any] = {}

    def read(self, key: ViewKey) -> Any:
        try:
            snapshot = self._views[key]
        except KeyError:
            raise ViewNotCached(key) from None
        return copy.deepcopy(snapshot)

    def write(self, key: ViewKey, snapshot: Any) -> None:
        self._views[key] = copy.deepcopy(snapshot)

    def has(self, key: ViewKey) -> bool:
        return key in self._views

    def evict(self, key: ViewKey) -> None:
        self._views.pop(key, None)

    def clear(self) -> None:
        self._views.clear()

    def __len__(self) -> int:
        return len(self._views)
