"""
DOMAIN EXCEPTIONS - Business rule violations and port failures

These exceptions are raised by domain/application logic and caught by the
presentation layer, which maps them to HTTP status codes.
"""

from intellitutor.domain.exceptions.entity_not_found import EntityNotFoundError
from intellitutor.domain.exceptions.access_denied import AccessDeniedError
from intellitutor.domain.exceptions.validation_error import DomainValidationError
from intellitutor.domain.exceptions.provider_unavailable import ProviderUnavailableError
from intellitutor.domain.exceptions.storage_error import StorageError

__all__ = [
    "EntityNotFoundError",
    "AccessDeniedError",
    "DomainValidationError",
    "ProviderUnavailableError",
    "StorageError",
]
