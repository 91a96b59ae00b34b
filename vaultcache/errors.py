"""
vaultcache — Core Error Types

Defines the exception hierarchy for the cache facade and its backends.
All exceptions inherit from VaultCacheError for consistent error handling.

Validation errors (InvalidKeyError, InvalidTtlError) are raised before any
backend interaction. Backend and crypto failures are wrapped at the boundary
with the original exception chained as ``__cause__``.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for structured error reporting.

    Used by callers that need to map exceptions onto responses or metrics.
    """

    # Input validation errors
    INVALID_KEY = "INVALID_KEY"
    INVALID_TTL = "INVALID_TTL"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

    # Lifecycle errors
    NOT_CONFIGURED = "NOT_CONFIGURED"

    # Backend errors
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    CACHE_FAILURE = "CACHE_FAILURE"

    # Value transform errors
    CRYPTO_FAILURE = "CRYPTO_FAILURE"
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class VaultCacheError(Exception):
    """Base exception for all vaultcache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(VaultCacheError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class InvalidKeyError(VaultCacheError):
    """Raised when a cache key is empty, whitespace-only or not a string."""

    def __init__(self, key: Any, details: dict[str, Any] | None = None):
        message = "The key provided is not valid"
        error_details = details or {}
        error_details.setdefault("key", repr(key))
        super().__init__(message, error_details, status_code=400)


class InvalidTtlError(VaultCacheError):
    """Raised when a TTL value is malformed or resolves to a negative duration."""

    def __init__(self, reason: str, ttl: Any = None):
        message = f"Invalid TTL value: {reason}"
        super().__init__(message, {"ttl": repr(ttl), "reason": reason}, status_code=400)


class NotConfiguredError(VaultCacheError):
    """Raised when an operation is attempted on a facade without a backend."""

    def __init__(self, operation: str):
        message = f"Cache is not configured; cannot perform '{operation}'"
        super().__init__(message, {"operation": operation}, status_code=500)


class CacheError(VaultCacheError):
    """Base exception for backend-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class BackendUnavailableError(CacheError):
    """Raised when a backend cannot be constructed or its connection fails."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None):
        message = f"Cache backend unavailable: {backend}"
        error_details = details or {}
        error_details.setdefault("backend", backend)
        super().__init__(message, error_details)
        self.status_code = 503


class CacheOperationError(CacheError):
    """Raised when a single backend operation fails."""

    pass


class CryptoError(VaultCacheError):
    """Raised when a value cannot be encrypted or decrypted."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class SerializationError(VaultCacheError):
    """Raised when a value cannot be converted to or from its stored form."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


def is_retryable_error(error: Exception) -> bool:
    """
    Check if an error is transient and the caller may retry.

    The facade never retries on its own; this helper only classifies.

    Args:
        error: Exception to check

    Returns:
        True if error is retryable (transient)
    """
    if isinstance(error, BackendUnavailableError):
        return True

    if isinstance(error, CacheOperationError):
        error_msg = str(error).lower()
        transient_indicators = ["timeout", "connection", "busy", "loading", "locked"]
        return any(indicator in error_msg for indicator in transient_indicators)

    return False


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, InvalidKeyError):
        return ErrorCode.INVALID_KEY

    if isinstance(error, InvalidTtlError):
        return ErrorCode.INVALID_TTL

    if isinstance(error, NotConfiguredError):
        return ErrorCode.NOT_CONFIGURED

    if isinstance(error, BackendUnavailableError):
        return ErrorCode.BACKEND_UNAVAILABLE

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, CryptoError):
        return ErrorCode.CRYPTO_FAILURE

    if isinstance(error, SerializationError):
        return ErrorCode.SERIALIZATION_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.INVALID_CONFIGURATION

    return ErrorCode.INTERNAL_ERROR
