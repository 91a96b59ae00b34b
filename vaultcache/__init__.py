"""
vaultcache — Cache Access Facade

Uniform read/write surface over filesystem and Redis storage, with
transparent value encryption, value serialization and TTL normalization.
"""

__version__ = "1.0.0"

from .cache import MISS, Cache, create_cache, get_cache
from .cache.ttl import TtlParser
from .config import BackendKind, CacheConfig
from .errors import (
    BackendUnavailableError,
    CacheOperationError,
    ConfigurationError,
    CryptoError,
    InvalidKeyError,
    InvalidTtlError,
    NotConfiguredError,
    SerializationError,
    VaultCacheError,
)

__all__ = [
    "Cache",
    "MISS",
    "create_cache",
    "get_cache",
    "CacheConfig",
    "BackendKind",
    "TtlParser",
    # Errors
    "VaultCacheError",
    "ConfigurationError",
    "InvalidKeyError",
    "InvalidTtlError",
    "NotConfiguredError",
    "BackendUnavailableError",
    "CacheOperationError",
    "CryptoError",
    "SerializationError",
]
