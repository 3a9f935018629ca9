"""
AccessDeniedError - Raised when a user touches a conversation they do not own.
Maps to: HTTP 404 Not Found (existence of other users' data is never revealed)
"""


class AccessDeniedError(Exception):
    """Raised when user lacks permission to access a resource"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)
