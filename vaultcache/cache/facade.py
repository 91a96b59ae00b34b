"""
vaultcache — Cache Facade

Uniform synchronous read/write surface over a storage backend.

Every call runs one pipeline:
    validate key -> format key -> serialize -> encrypt -> backend call
and, on reads, the inverse transform decrypt -> deserialize.

Usage:
    from vaultcache import Cache, CacheConfig

    cache = Cache(CacheConfig(crypto_salt="s3cret", prefix="app:"))
    cache.write("user:1", {"name": "Ada"}, ttl="+10 minutes")
    cache.read("user:1")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..config import CacheConfig
from ..errors import CryptoError, InvalidKeyError, NotConfiguredError
from ..security.cipher import ValueCipher
from . import serialization
from .factory import BackendFactory, get_backend_factory
from .interface import CacheBackendInterface
from .ttl import TtlParser, TtlValue

logger = logging.getLogger(__name__)


class _Missing:
    """Type of the MISS sentinel."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISS"

    def __reduce__(self) -> str:
        return "MISS"


MISS: Any = _Missing()


class Cache:
    """
    Cache facade bound to one configuration and one backend.

    The backend is owned by this instance. Reconfiguring with with_config()
    returns a new facade with its own backend and leaves this one untouched.
    A facade created without a config rejects every operation with
    NotConfiguredError.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        factory: BackendFactory | None = None,
        backend: CacheBackendInterface | None = None,
    ):
        """
        Initialize the facade.

        Args:
            config: Cache configuration; None leaves the facade unconfigured
            factory: Backend factory (defaults to the process-wide one)
            backend: Pre-built backend to use instead of asking the factory
        """
        self._config = config
        self._factory = factory
        self._ttl_parser = TtlParser()
        self._backend: CacheBackendInterface | None = None
        self._cipher: ValueCipher | None = None

        if config is None:
            return

        if config.with_encryption and config.crypto_salt:
            self._cipher = ValueCipher(config.crypto_salt)

        self._backend = backend if backend is not None else (factory or get_backend_factory()).create(config)

    def __repr__(self) -> str:
        if self._config is None:
            return "Cache(<not configured>)"
        return f"Cache(backend={self._config.backend.value!r}, prefix={self._config.prefix!r})"

    def __enter__(self) -> Cache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------ Configuration ------------

    @property
    def config(self) -> CacheConfig | None:
        return self._config

    @property
    def backend(self) -> CacheBackendInterface | None:
        return self._backend

    @property
    def is_configured(self) -> bool:
        return self._backend is not None

    def with_config(self, config: CacheConfig) -> Cache:
        """
        Return a new facade bound to ``config`` and a fresh backend.

        The current facade and its backend are left untouched.
        """
        return Cache(config, factory=self._factory)

    # ------------ Pipeline helpers ------------

    def _require_backend(self, operation: str) -> tuple[CacheConfig, CacheBackendInterface]:
        if self._config is None or self._backend is None:
            raise NotConfiguredError(operation)
        return self._config, self._backend

    @staticmethod
    def _validate_key(key: Any) -> None:
        if not isinstance(key, str) or not key.strip():
            raise InvalidKeyError(key)

    @staticmethod
    def _format_key(config: CacheConfig, key: str) -> str:
        if not config.prefix:
            return key
        return f"{config.prefix}{key}"

    def _resolve_ttl(self, config: CacheConfig, ttl: TtlValue) -> int | None:
        return self._ttl_parser.to_seconds(ttl if ttl is not None else config.duration)

    def _encode(self, config: CacheConfig, value: Any) -> Any:
        if config.with_serialization:
            value = serialization.dumps(value)

        if self._cipher is not None:
            try:
                value = self._cipher.encrypt(value)
            except CryptoError:
                raise
            except Exception as e:
                raise CryptoError(f"Failed to encrypt value: {e}") from e

        return value

    def _decode(self, config: CacheConfig, raw: Any) -> Any:
        value = raw
        if self._cipher is not None:
            try:
                value = self._cipher.decrypt(value)
            except CryptoError:
                raise
            except Exception as e:
                raise CryptoError(f"Failed to decrypt value: {e}") from e

        if config.with_serialization:
            value = serialization.loads(value)

        return value

    @staticmethod
    def _is_miss(raw: Any) -> bool:
        return raw is None or (isinstance(raw, (str, bytes)) and not raw)

    # ------------ Single-key operations ------------

    def write(self, key: str, value: Any, ttl: TtlValue = None) -> bool:
        """
        Store a value, overwriting any existing entry.

        Args:
            key: Logical cache key
            value: Value to store
            ttl: Seconds, timedelta or "+<n> <unit>" string; falls back to
                the configured duration, then to the backend default

        Returns:
            The backend's success indicator

        Raises:
            InvalidKeyError, InvalidTtlError: Before any backend interaction
            SerializationError, CryptoError: If the value cannot be transformed
        """
        self._validate_key(key)
        config, backend = self._require_backend("write")
        resolved_ttl = self._resolve_ttl(config, ttl)
        storage_key = self._format_key(config, key)
        payload = self._encode(config, value)

        stored = backend.set(storage_key, payload, resolved_ttl)
        logger.debug("Cache write %s", storage_key, extra={"key": storage_key, "ttl": resolved_ttl, "stored": stored})
        return stored

    def read(self, key: str, default: Any = MISS) -> Any:
        """
        Read a value.

        Returns:
            The original value, or ``default`` (MISS unless given) on a miss
        """
        self._validate_key(key)
        config, backend = self._require_backend("read")
        storage_key = self._format_key(config, key)

        raw = backend.get(storage_key)
        if self._is_miss(raw):
            logger.debug("Cache miss %s", storage_key, extra={"key": storage_key})
            return default

        return self._decode(config, raw)

    def delete(self, key: str) -> bool:
        self._validate_key(key)
        config, backend = self._require_backend("delete")
        return backend.delete(self._format_key(config, key))

    def check(self, key: str) -> bool:
        """Return True if the key is present and not expired."""
        self._validate_key(key)
        config, backend = self._require_backend("check")
        return backend.has(self._format_key(config, key))

    def clear(self) -> bool:
        """Wipe the whole backend namespace, prefixed or not."""
        _, backend = self._require_backend("clear")
        return backend.clear()

    # ------------ Batch operations ------------

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """
        Read several keys. Not atomic across keys.

        Returns:
            Mapping of every requested key to its value, or ``default`` on a miss
        """
        keys = list(keys)
        for key in keys:
            self._validate_key(key)
        config, backend = self._require_backend("get_multiple")

        storage_keys = {key: self._format_key(config, key) for key in keys}
        found = backend.get_many(list(dict.fromkeys(storage_keys.values())))

        result: dict[str, Any] = {}
        for key, storage_key in storage_keys.items():
            raw = found.get(storage_key)
            result[key] = default if self._is_miss(raw) else self._decode(config, raw)
        return result

    def set_multiple(self, values: Mapping[str, Any], ttl: TtlValue = None) -> bool:
        """
        Write several values with one TTL.

        Every key and value is validated and transformed before the first
        backend call. Keys written before a failure are not rolled back.

        Returns:
            True only if every write succeeded
        """
        for key in values:
            self._validate_key(key)
        config, backend = self._require_backend("set_multiple")
        resolved_ttl = self._resolve_ttl(config, ttl)

        payloads = {self._format_key(config, key): self._encode(config, value) for key, value in values.items()}
        if not payloads:
            return True

        stored = backend.set_many(payloads, resolved_ttl)
        if stored != len(payloads):
            logger.warning(
                "Partial batch write: %d of %d keys stored",
                stored,
                len(payloads),
                extra={"stored": stored, "requested": len(payloads)},
            )
        return stored == len(payloads)

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """
        Delete several keys.

        Returns:
            True unless the backend failed; absent keys count as deleted
        """
        keys = list(keys)
        for key in keys:
            self._validate_key(key)
        config, backend = self._require_backend("delete_multiple")

        storage_keys = list(dict.fromkeys(self._format_key(config, key) for key in keys))
        if not storage_keys:
            return True

        removed = backend.delete_many(storage_keys)
        logger.debug(
            "Batch delete removed %d of %d keys",
            removed,
            len(storage_keys),
            extra={"removed": removed, "requested": len(storage_keys)},
        )
        return True

    # ------------ Lifecycle ------------

    def stats(self) -> dict[str, Any]:
        _, backend = self._require_backend("stats")
        return backend.get_stats()

    def close(self) -> None:
        """Release the backend. Safe to call on an unconfigured facade."""
        if self._backend is not None:
            self._backend.close()
