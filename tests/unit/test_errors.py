"""
vaultcache — Error Hierarchy Tests
"""

import pytest

from vaultcache.errors import (
    BackendUnavailableError,
    CacheError,
    CacheOperationError,
    ConfigurationError,
    CryptoError,
    ErrorCode,
    InvalidKeyError,
    InvalidTtlError,
    NotConfiguredError,
    SerializationError,
    VaultCacheError,
    extract_error_code,
    is_retryable_error,
)


class TestErrorHierarchy:
    """Structure of the exception classes."""

    def test_invalid_key_error(self) -> None:
        error = InvalidKeyError("   ")

        assert str(error) == "The key provided is not valid"
        assert error.status_code == 400
        assert error.details == {"key": "'   '"}

    def test_invalid_ttl_error(self) -> None:
        error = InvalidTtlError("Must start with +", "1 hour")

        assert error.message == "Invalid TTL value: Must start with +"
        assert error.details["ttl"] == "'1 hour'"
        assert error.status_code == 400

    def test_backend_unavailable_error(self) -> None:
        error = BackendUnavailableError("redis", details={"url": "redis://h:1/0"})

        assert isinstance(error, CacheError)
        assert error.status_code == 503
        assert error.details == {"url": "redis://h:1/0", "backend": "redis"}

    def test_to_dict(self) -> None:
        error = NotConfiguredError("read")

        assert error.to_dict() == {
            "error": "NotConfiguredError",
            "message": "Cache is not configured; cannot perform 'read'",
            "details": {"operation": "read"},
        }

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            InvalidKeyError(""),
            InvalidTtlError("bad"),
            NotConfiguredError("write"),
            CacheOperationError("failed"),
            CryptoError("bad"),
            SerializationError("bad"),
        ],
    )
    def test_all_errors_share_base(self, error: Exception) -> None:
        assert isinstance(error, VaultCacheError)


class TestErrorHelpers:
    """extract_error_code() and is_retryable_error()."""

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (InvalidKeyError(""), ErrorCode.INVALID_KEY),
            (InvalidTtlError("bad"), ErrorCode.INVALID_TTL),
            (NotConfiguredError("read"), ErrorCode.NOT_CONFIGURED),
            (BackendUnavailableError("redis"), ErrorCode.BACKEND_UNAVAILABLE),
            (CacheOperationError("failed"), ErrorCode.CACHE_FAILURE),
            (CryptoError("bad"), ErrorCode.CRYPTO_FAILURE),
            (SerializationError("bad"), ErrorCode.SERIALIZATION_FAILURE),
            (ConfigurationError("bad"), ErrorCode.INVALID_CONFIGURATION),
            (RuntimeError("boom"), ErrorCode.INTERNAL_ERROR),
        ],
    )
    def test_extract_error_code(self, error: Exception, code: ErrorCode) -> None:
        assert extract_error_code(error) == code

    def test_backend_unavailable_is_retryable(self) -> None:
        assert is_retryable_error(BackendUnavailableError("filesystem")) is True

    def test_transient_operation_error_is_retryable(self) -> None:
        assert is_retryable_error(CacheOperationError("database is locked")) is True
        assert is_retryable_error(CacheOperationError("Timeout reading from socket")) is True

    def test_permanent_errors_are_not_retryable(self) -> None:
        assert is_retryable_error(CacheOperationError("WRONGTYPE Operation")) is False
        assert is_retryable_error(CryptoError("Wrong key or modified ciphertext")) is False
        assert is_retryable_error(ValueError("timeout")) is False
