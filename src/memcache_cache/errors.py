"""
memcache-cache - Error Types

Defines the exception hierarchy for the cache package.
All exceptions inherit from CacheError for consistent error handling.

Only ConfigurationError and CacheConnectionError ever leave a cache
backend as raised errors; per-operation failures degrade to sentinel
return values inside the backends.
"""

from typing import Any


class CacheError(Exception):
    """Base exception for all cache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logs and responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CacheError):
    """Raised when configuration is invalid or missing."""


class CacheConnectionError(CacheError):
    """Raised when none of the configured cache servers can be reached."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None):
        message = f"Impossible to establish connection to {backend} server"
        super().__init__(message, details)
        self.backend = backend


class CacheOperationError(CacheError):
    """Raised when a single cache operation fails against the client."""

    def __init__(self, operation: str, key: str | None = None, details: dict[str, Any] | None = None):
        message = f"Cache operation '{operation}' failed"
        if key is not None:
            message += f" for key '{key}'"
        error_details = details or {}
        error_details.update({"operation": operation, "key": key})
        super().__init__(message, error_details)
        self.operation = operation
        self.key = key
