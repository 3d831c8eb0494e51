class StoreError(Exception):
    """Raised when a record-store operation fails."""

    category = "StoreError"


class RecordNotFoundError(StoreError):
    """Raised when no saved record exists for the given key."""
