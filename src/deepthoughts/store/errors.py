"""Storage errors."""

from deepthoughts.errors import Conflict


class DuplicateKeyError(Conflict):
    """A unique field (e.g. username, email) already holds this value."""

    def __init__(self, collection: str, field: str):
        self.collection = collection
        self.field = field
        super().__init__(f"A {collection[:-1]} with this {field} already exists")
