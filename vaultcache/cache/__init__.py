"""
vaultcache — Cache Module

Facade, backend factory and storage backends.

- facade.py: Cache, the read/write surface (key formatting, serialization,
  encryption, TTL resolution, batch composition)
- factory.py: single source of truth for backend creation
- interface.py: abstract backend contract
- backends/: filesystem (diskcache) and Redis implementations

Usage:
    from vaultcache.cache import Cache, create_cache

    cache = Cache(CacheConfig(crypto_salt="s3cret"))
    cache.write("key", "value", ttl="+1 hour")
    value = cache.read("key")
"""

from .facade import MISS, Cache
from .factory import BackendFactory, get_backend_factory, reset_backend_factory
from .interface import CacheBackendInterface
from .registry import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_registry,
)
from .ttl import TtlParser

__all__ = [
    # Facade
    "Cache",
    "MISS",
    # Factory
    "BackendFactory",
    "get_backend_factory",
    "reset_backend_factory",
    # Named instances
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_registry",
    # Interface and helpers
    "CacheBackendInterface",
    "TtlParser",
]
