"""
vaultcache — Redis Storage Backend

Synchronous Redis backend with:
- JSON payloads
- Per-key TTL support
- Namespace prefixing for safe multi-tenant usage
- Batch operations using MGET and non-transactional pipelines

Atomicity of single-key operations is provided by Redis itself.

Example:
    backend = RedisCacheBackend(redis_url="redis://localhost:6379/0", namespace="app", default_ttl=300)
    backend.set("greeting", "hello", ttl=60)
    value = backend.get("greeting")
"""

from __future__ import annotations

import json
import logging
from typing import Any, NoReturn

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ...errors import BackendUnavailableError, CacheOperationError, SerializationError
from ..interface import CacheBackendInterface

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheBackendInterface):
    """
    Redis backend with JSON serialization and TTL.

    Notes:
    - Keys are prefixed with the configured namespace to avoid collisions.
    - Values are stored as UTF-8 JSON strings.
    - TTL is applied via Redis EX seconds (None -> default_ttl, 0 -> no expiry).
    - Lost connections raise BackendUnavailableError, other command
      failures raise CacheOperationError.
    """

    def __init__(
        self,
        redis_url: str,
        namespace: str = "persistent",
        default_ttl: int = 300,
        socket_timeout: float | None = None,
        decode_responses: bool = True,
    ) -> None:
        """
        Initialize Redis backend.

        Args:
            redis_url: Connection URL, e.g. redis://localhost:6379/0
            namespace: Prefix for all keys
            default_ttl: Default TTL in seconds (0 => no expiry)
            socket_timeout: Socket timeout in seconds (None => block)
            decode_responses: If True, values returned as str, not bytes
        """
        if not redis_url:
            raise ValueError("redis_url is required")

        self.namespace = namespace.strip() or "persistent"
        self.default_ttl = max(0, int(default_ttl))
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        # Lazy connection; connects on first command
        self._client = Redis.from_url(
            url=redis_url,
            decode_responses=decode_responses,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}"

    @staticmethod
    def _to_json(value: Any) -> str:
        """Serialize value to JSON string."""
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Value of type {type(value).__name__} cannot be stored in Redis: {e}",
                details={"value_type": type(value).__name__},
            ) from e

    @staticmethod
    def _from_json(data: str | bytes | None) -> Any | None:
        """Deserialize JSON string to Python object. Returns None if data is None."""
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return json.loads(data)
        except ValueError as e:
            # Written by another client; hand back the raw payload
            logger.warning(
                "Failed to decode JSON from cache, returning raw data: %s",
                e,
                extra={"data_preview": data[:100], "error": str(e)},
            )
            return data

    def _ttl_seconds(self, ttl: int | None) -> int | None:
        """
        Normalize TTL:
        - None -> default_ttl
        - 0 -> no expiry (return None)
        - positive -> provided ttl
        """
        if ttl is None:
            ttl = self.default_ttl
        ttl = int(ttl)
        return ttl if ttl > 0 else None

    def _fail(self, operation: str, key: str | None, error: RedisError) -> NoReturn:
        logger.error(
            "Redis %s failed for key '%s': %s",
            operation,
            key,
            error,
            extra={"key": key, "namespace": self.namespace, "operation": operation, "error": str(error)},
            exc_info=True,
        )
        if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
            raise BackendUnavailableError(
                "redis",
                details={"operation": operation, "namespace": self.namespace, "error": str(error)},
            ) from error
        raise CacheOperationError(
            f"Redis {operation} failed: {error}",
            details={"key": key, "namespace": self.namespace, "operation": operation},
        ) from error

    # ------------ Core Interface ------------

    def ping(self) -> bool:
        """Verify the connection; raises BackendUnavailableError when unreachable."""
        try:
            return bool(self._client.ping())
        except RedisError as e:
            self._fail("ping", None, e)

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        try:
            data = self._client.get(self._make_key(key))
        except RedisError as e:
            self._fail("get", key, e)

        if data is None:
            self._misses += 1
            return None

        self._hits += 1
        return self._from_json(data)

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store a value with optional TTL."""
        payload = self._to_json(value)
        try:
            # redis-py returns True or 'OK' depending on decode_responses
            res = self._client.set(name=self._make_key(key), value=payload, ex=self._ttl_seconds(ttl))
        except RedisError as e:
            self._fail("set", key, e)

        success = bool(res)
        if success:
            self._sets += 1
        return success

    def delete(self, key: str) -> bool:
        """Delete a single key."""
        try:
            deleted = self._client.delete(self._make_key(key))
        except RedisError as e:
            self._fail("delete", key, e)

        if deleted:
            self._deletes += 1
        return bool(deleted)

    def has(self, key: str) -> bool:
        """Check if a key exists."""
        try:
            return bool(self._client.exists(self._make_key(key)))
        except RedisError as e:
            self._fail("has", key, e)

    def clear(self) -> bool:
        """
        Clear all entries under the namespace.

        Implementation: SCAN match "<namespace>:*" and DEL in batches.
        """
        pattern = f"{self.namespace}:*"
        cursor = 0
        total_deleted = 0
        batch_size = 1000

        try:
            while True:
                cursor, keys = self._client.scan(cursor=cursor, match=pattern, count=batch_size)
                if keys:
                    total_deleted += self._client.delete(*keys)
                if cursor == 0:
                    break
        except RedisError as e:
            self._fail("clear", None, e)

        self._deletes += total_deleted
        logger.info("Cleared %d keys from namespace '%s'", total_deleted, self.namespace)
        return True

    def get_stats(self) -> dict[str, Any]:
        """Return backend statistics and basic Redis info."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": "redis",
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": False,
        }

        try:
            stats["connected"] = bool(self._client.ping())
            info = self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
            stats["redis_mode"] = info.get("redis_mode")
        except RedisError as e:
            # INFO may be restricted; keep minimal stats
            logger.warning("Failed to get Redis INFO (restricted or unavailable): %s", e, extra={"error": str(e)})

        return stats

    def close(self) -> None:
        """Close the Redis client and release pooled connections."""
        self._client.close()
        self._client.connection_pool.disconnect()
        logger.info("Closed Redis cache backend for namespace '%s'", self.namespace)

    # ------------ Batch operations ------------

    def get_many(self, keys: list[str]) -> dict[str, Any]:
        """
        Retrieve multiple values in one round-trip using MGET.
        Missing keys are omitted from the result.
        """
        if not keys:
            return {}

        try:
            values = self._client.mget([self._make_key(k) for k in keys])
        except RedisError as e:
            self._fail("get_many", None, e)

        result: dict[str, Any] = {}
        # mget preserves order
        for k, raw in zip(keys, values, strict=True):
            if raw is None:
                self._misses += 1
                continue
            self._hits += 1
            result[k] = self._from_json(raw)

        return result

    def set_many(self, items: dict[str, Any], ttl: int | None = None) -> int:
        """
        Store multiple values using a non-transactional pipeline.
        Returns number of items successfully stored.
        """
        if not items:
            return 0

        ex = self._ttl_seconds(ttl)
        pipe = self._client.pipeline(transaction=False)
        for key, value in items.items():
            pipe.set(self._make_key(key), self._to_json(value), ex=ex)

        try:
            results = pipe.execute(raise_on_error=False)
        except RedisError as e:
            self._fail("set_many", None, e)

        success_count = sum(1 for r in results if r in (True, "OK", b"OK"))
        self._sets += success_count
        return success_count

    def delete_many(self, keys: list[str]) -> int:
        """
        Delete multiple keys in chunks of variadic DEL.
        Returns number of keys successfully deleted.
        """
        if not keys:
            return 0

        ns_keys = [self._make_key(k) for k in keys]
        deleted_total = 0
        chunk_size = 1000

        try:
            for i in range(0, len(ns_keys), chunk_size):
                deleted_total += int(self._client.delete(*ns_keys[i : i + chunk_size]))
        except RedisError as e:
            self._fail("delete_many", None, e)

        self._deletes += deleted_total
        return deleted_total
