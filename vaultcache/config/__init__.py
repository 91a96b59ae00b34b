"""
vaultcache — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config, reset_config
from .schemas import (
    BackendKind,
    CacheConfig,
    Environment,
    LogLevel,
    VaultCacheSettings,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "reset_config",
    # Main settings
    "VaultCacheSettings",
    # Enums
    "Environment",
    "BackendKind",
    "LogLevel",
    # Config sections
    "CacheConfig",
]
