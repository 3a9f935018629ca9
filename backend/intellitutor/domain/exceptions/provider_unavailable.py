"""
ProviderUnavailableError - The language-model provider could not produce a reply.

Raised by ModelGateway implementations (network error, timeout, non-success
status, missing credential, malformed response, open circuit).
Never reaches HTTP: the message pipeline replaces it with a fallback reply.
"""


class ProviderUnavailableError(Exception):
    """Exception raised when the model provider call cannot be completed."""

    def __init__(self, message: str = "Model provider unavailable"):
        super().__init__(message)
