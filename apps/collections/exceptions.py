class CollectionError(Exception):
    """Base class for collection service errors."""


class CollectionNotFound(CollectionError):
    def __init__(self, collection_id):
        self.collection_id = collection_id
        super().__init__(f"Collection {collection_id} not found")


class InvalidRule(CollectionError):
    """Raised when a rule has an unknown type or operator."""
