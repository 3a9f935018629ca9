"""
StorageError - The persistence layer (or lock backend) is unreachable or failed.
Maps to: HTTP 500 Internal Server Error. Never masked.
"""


class StorageError(Exception):
    """Exception raised when a persistence operation fails."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message)
