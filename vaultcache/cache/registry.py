"""
vaultcache — Named Cache Registry

Explicit lookup of named Cache facades. Callers name the instance they
want; nothing is dispatched implicitly.

Examples:
    from vaultcache.cache.registry import create_cache, get_cache

    create_cache(CacheConfig(namespace="sessions"), name="sessions")
    get_cache("sessions").write("sid", {"user": 1})
"""

from __future__ import annotations

import logging

from ..config import CacheConfig, get_config
from .facade import Cache

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, Cache] = {}


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
) -> Cache:
    """
    Create a named Cache facade.

    Args:
        config: Cache configuration (uses loaded settings if not provided)
        name: Instance name

    Returns:
        The registered facade; an existing instance is returned unchanged

    Raises:
        ConfigurationError: If settings cannot be loaded
        BackendUnavailableError: If the backend cannot be created
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    cache = Cache(config)
    _cache_instances[name] = cache

    logger.info(
        "Cache instance '%s' created successfully",
        name,
        extra={"cache_name": name, "backend": config.backend.value},
    )
    return cache


def get_cache(name: str = "default") -> Cache:
    """
    Get a named Cache facade, creating it from loaded settings if missing.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())


def close_all_caches() -> None:
    """
    Close all registered facades and empty the registry.

    A failing close is logged and does not stop the others from closing.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            cache.close()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_registry() -> None:
    """
    Clear all instance references without closing them.

    Warning: Only use this in testing contexts.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache registry, cleared %d instance reference(s)", count)
