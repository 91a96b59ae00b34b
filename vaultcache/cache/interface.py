"""
vaultcache — Storage Backend Interface

Defines the abstract interface that all storage backends must implement.
Backends provide atomic single-key primitives; the facade builds everything
else on top of them.
"""

from abc import ABC, abstractmethod
from typing import Any


class CacheBackendInterface(ABC):
    """
    Abstract base class for storage backends.

    All backends must implement this interface to ensure consistent
    behavior across implementations (filesystem, Redis).

    TTL semantics shared by every backend:
    - None: apply the backend's default TTL
    - 0: no expiry
    - positive: expire after that many seconds
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """
        Retrieve a value from the backend.

        Args:
            key: Storage key

        Returns:
            Stored value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """
        Store a value, overwriting any existing entry.

        Args:
            key: Storage key
            value: Value to store
            ttl: Time-to-live in seconds

        Returns:
            True if stored successfully, False otherwise
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if key was deleted, False if key didn't exist
        """
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        """
        Check if a key exists.

        Returns:
            True if key exists and is not expired, False otherwise
        """
        pass

    @abstractmethod
    def clear(self) -> bool:
        """
        Clear every entry in the backend namespace.

        Returns:
            True if the namespace was cleared successfully
        """
        pass

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """
        Get backend statistics.

        Returns:
            Dictionary with statistics (hits, misses, sets, deletes, ...)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release connections and file handles held by the backend."""
        pass

    def get_many(self, keys: list[str]) -> dict[str, Any]:
        """
        Retrieve multiple values.

        Default implementation calls get() for each key.
        Backends can override for better performance.

        Args:
            keys: List of storage keys

        Returns:
            Dictionary mapping keys to values (missing keys are omitted)
        """
        result = {}
        for key in keys:
            value = self.get(key)
            if value is not None:
                result[key] = value
        return result

    def set_many(
        self,
        items: dict[str, Any],
        ttl: int | None = None,
    ) -> int:
        """
        Store multiple values.

        Default implementation calls set() for each item. Not atomic:
        items stored before a failure stay stored.

        Args:
            items: Dictionary mapping keys to values
            ttl: Time-to-live in seconds (applies to all items)

        Returns:
            Number of items successfully stored
        """
        count = 0
        for key, value in items.items():
            if self.set(key, value, ttl):
                count += 1
        return count

    def delete_many(self, keys: list[str]) -> int:
        """
        Delete multiple keys.

        Default implementation calls delete() for each key.

        Returns:
            Number of keys successfully deleted
        """
        count = 0
        for key in keys:
            if self.delete(key):
                count += 1
        return count
