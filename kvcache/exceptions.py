"""
Custom exceptions for kvcache.
"""

from typing import Any


class KVCacheError(Exception):
    """Base exception for all kvcache errors."""

    def __init__(self, message: str, error_code: str | None = None, details: dict | None = None):
        """
        Initialize exception.

        Args:
            message: Error message
            error_code: Optional error code
            details: Optional error details
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


# Store Errors


class CacheError(KVCacheError):
    """Remote store errors."""

    pass


class CacheConnectionError(CacheError):
    """Connection or timeout failure talking to the remote store."""

    def __init__(self, message: str = "Failed to connect to cache"):
        """Initialize exception."""
        super().__init__(message, error_code="CACHE_CONNECTION_ERROR")


# Argument Errors


class InvalidArgumentError(KVCacheError):
    """Argument rejected by the client or the store."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        """
        Initialize exception.

        Args:
            message: Error message
            field: Argument name
            value: Argument value
        """
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, error_code="INVALID_ARGUMENT", details=details)


class ListIndexOutOfRangeError(InvalidArgumentError):
    """List index outside the bounds of the list."""

    def __init__(self, list_name: str, index: int):
        """
        Initialize exception.

        Args:
            list_name: List key
            index: Offending index
        """
        super().__init__(f"Index {index} out of range for list '{list_name}'", field="index", value=index)
        self.error_code = "LIST_INDEX_OUT_OF_RANGE"
        self.details["list"] = list_name
