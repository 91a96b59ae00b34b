"""
vaultcache — Filesystem Storage Backend

Disk-backed store built on diskcache. Each namespace gets its own
subdirectory, so clear() only wipes that namespace. Single-key operations
are atomic through diskcache's SQLite transactions and are safe across
threads and processes.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any

from diskcache import Cache as DiskCache
from diskcache import Timeout

from ...errors import CacheOperationError
from ..interface import CacheBackendInterface

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (sqlite3.Error, OSError, Timeout)


class FilesystemCacheBackend(CacheBackendInterface):
    """
    Filesystem backend with per-key TTL.

    Values are pickled by diskcache, so any picklable object can be stored
    when the facade has serialization disabled.
    """

    def __init__(
        self,
        directory: str | Path,
        namespace: str = "persistent",
        default_ttl: int = 300,
    ):
        """
        Initialize filesystem backend.

        Args:
            directory: Working directory for the cache
            namespace: Subdirectory isolating this cache's entries
            default_ttl: Default TTL in seconds (0 = no expiry)
        """
        self.namespace = namespace.strip() or "persistent"
        self.default_ttl = max(0, int(default_ttl))
        self.directory = Path(directory) / self.namespace

        self._cache = DiskCache(directory=str(self.directory))

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    def _expire(self, ttl: int | None) -> int | None:
        if ttl is None:
            ttl = self.default_ttl
        return ttl if ttl > 0 else None

    def _fail(self, operation: str, key: str | None, error: Exception) -> CacheOperationError:
        logger.error(
            "Filesystem cache %s failed for key '%s': %s",
            operation,
            key,
            error,
            extra={"key": key, "namespace": self.namespace, "operation": operation, "error": str(error)},
            exc_info=True,
        )
        return CacheOperationError(
            f"Filesystem cache {operation} failed: {error}",
            details={"key": key, "namespace": self.namespace, "operation": operation},
        )

    def get(self, key: str) -> Any | None:
        """Retrieve value from disk."""
        try:
            value = self._cache.get(key, default=None)
        except _BACKEND_ERRORS as e:
            raise self._fail("get", key, e) from e

        if value is None:
            self._misses += 1
            return None

        self._hits += 1
        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value on disk."""
        try:
            stored = bool(self._cache.set(key, value, expire=self._expire(ttl)))
        except _BACKEND_ERRORS as e:
            raise self._fail("set", key, e) from e

        if stored:
            self._sets += 1
        return stored

    def delete(self, key: str) -> bool:
        """Delete a key from disk."""
        try:
            deleted = bool(self._cache.delete(key))
        except _BACKEND_ERRORS as e:
            raise self._fail("delete", key, e) from e

        if deleted:
            self._deletes += 1
        return deleted

    def has(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        try:
            return key in self._cache
        except _BACKEND_ERRORS as e:
            raise self._fail("has", key, e) from e

    def clear(self) -> bool:
        """Remove every entry in this namespace."""
        try:
            removed = self._cache.clear()
        except _BACKEND_ERRORS as e:
            raise self._fail("clear", None, e) from e

        self._deletes += removed
        logger.info("Cleared %d keys from namespace '%s'", removed, self.namespace)
        return True

    def get_stats(self) -> dict[str, Any]:
        """Get filesystem cache statistics."""
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

        stats: dict[str, Any] = {
            "backend": "filesystem",
            "namespace": self.namespace,
            "directory": str(self.directory),
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
        }

        try:
            stats["size"] = len(self._cache)
            stats["volume_bytes"] = self._cache.volume()
        except _BACKEND_ERRORS as e:
            logger.warning("Failed to read filesystem cache size: %s", e, extra={"error": str(e)})

        return stats

    def close(self) -> None:
        """Close the underlying SQLite connections."""
        self._cache.close()
        logger.debug("Closed filesystem cache backend at %s", self.directory)
