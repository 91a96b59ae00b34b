"""
vaultcache — Backend Factory

Canonical factory for creating storage backends from configuration.
This is the ONLY place backends are constructed.

Key points:
- Backend kinds form a closed enumeration (BackendKind) mapped to explicit
  constructor methods; unknown kinds never reach this module
- Options are merged over documented defaults
- Redis is imported lazily so the filesystem backend works without it
- The factory is a process-wide singleton created lazily on first use;
  reset_backend_factory() drops it for test isolation

Examples:
    from vaultcache.cache.factory import get_backend_factory
    from vaultcache.config import CacheConfig

    backend = get_backend_factory().create(CacheConfig(namespace="app"))
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import quote

from ..config import BackendKind, CacheConfig
from ..errors import BackendUnavailableError, ConfigurationError, VaultCacheError
from .interface import CacheBackendInterface
from .ttl import TtlParser

logger = logging.getLogger(__name__)

CACHE_DIRNAME = "persistent"
CACHE_TTL = 300
CACHE_TMP_PATH = str(Path(tempfile.gettempdir()) / "vaultcache")

FILESYSTEM_DEFAULTS: dict[str, Any] = {
    "namespace": CACHE_DIRNAME,
    "ttl": CACHE_TTL,
    "dirname": CACHE_DIRNAME,
    "tmp_path": CACHE_TMP_PATH,
}

REDIS_DEFAULTS: dict[str, Any] = {
    "namespace": CACHE_DIRNAME,
    "ttl": CACHE_TTL,
    "server": "127.0.0.1",
    "port": 6379,
    "timeout": 0,
    "password": None,
    "database": 0,
}


def _merge(defaults: dict[str, Any], options: dict[str, Any] | None) -> dict[str, Any]:
    """Merge caller options over defaults; None values fall back to the default."""
    merged = dict(defaults)
    for key, value in (options or {}).items():
        if value is not None or key not in defaults:
            merged[key] = value
    return merged


def build_redis_url(server: str, port: int, database: int, password: str | None = None) -> str:
    """
    Assemble a Redis connection URL.

    The password is URL-escaped when present and omitted entirely when absent.
    """
    auth = f":{quote(password, safe='')}@" if password else ""
    return f"redis://{auth}{server}:{int(port)}/{int(database)}"


def _cache_directory(tmp_path: str | Path, dirname: str) -> Path:
    """Working directory of the filesystem backend: ``tmp_path / dirname``."""
    return Path(tmp_path) / str(dirname).strip(os.sep)


def _mask_url(url: str) -> str:
    if "@" not in url:
        return url
    scheme, rest = url.split("://", 1)
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


class BackendFactory:
    """
    Resolves configuration into concrete storage backends.

    Each call returns a new backend instance owned by the caller.
    """

    def __init__(self, ttl_parser: TtlParser | None = None):
        self._ttl_parser = ttl_parser or TtlParser()
        self._constructors: dict[BackendKind, Callable[[dict[str, Any]], CacheBackendInterface]] = {
            BackendKind.FILESYSTEM: self.create_filesystem_backend,
            BackendKind.REDIS: self.create_redis_backend,
        }

    def create(self, config: CacheConfig) -> CacheBackendInterface:
        """
        Create the backend selected by ``config.backend``.

        Raises:
            ConfigurationError: If the backend kind has no constructor
            BackendUnavailableError: If the backend cannot be reached or created
        """
        try:
            constructor = self._constructors[config.backend]
        except KeyError:
            raise ConfigurationError(
                f"Unknown cache backend: {config.backend}",
                details={
                    "backend": str(config.backend),
                    "supported": [kind.value for kind in self._constructors],
                },
            ) from None

        logger.info(
            "Creating %s cache backend",
            config.backend.value,
            extra={"backend": config.backend.value, "namespace": config.namespace},
        )
        return constructor(config.get_options())

    def create_filesystem_backend(self, options: dict[str, Any] | None = None) -> CacheBackendInterface:
        """
        Create a filesystem backend.

        The working directory is ``tmp_path / dirname`` and must be creatable
        and writable.
        """
        opts = _merge(FILESYSTEM_DEFAULTS, options)
        ttl = self._ttl_parser.to_seconds(opts["ttl"])
        directory = _cache_directory(opts["tmp_path"], opts["dirname"])

        try:
            from .backends.filesystem import FilesystemCacheBackend

            directory.mkdir(parents=True, exist_ok=True)
            if not os.access(directory, os.W_OK):
                raise PermissionError(f"Cache directory is not writable: {directory}")

            backend = FilesystemCacheBackend(
                directory=directory,
                namespace=opts["namespace"],
                default_ttl=CACHE_TTL if ttl is None else ttl,
            )
        except Exception as e:
            logger.error(
                "Failed to create filesystem backend at %s: %s",
                directory,
                e,
                extra={"backend": "filesystem", "directory": str(directory), "error": str(e)},
                exc_info=True,
            )
            raise BackendUnavailableError(
                "filesystem",
                details={"directory": str(directory), "error": str(e)},
            ) from e

        logger.debug("Filesystem backend ready at %s", backend.directory)
        return backend

    def create_redis_backend(self, options: dict[str, Any] | None = None) -> CacheBackendInterface:
        """
        Create a Redis backend and verify the connection with PING.

        Raises:
            BackendUnavailableError: If redis is not installed or unreachable
        """
        opts = _merge(REDIS_DEFAULTS, options)
        ttl = self._ttl_parser.to_seconds(opts["ttl"])
        url = build_redis_url(opts["server"], opts["port"], opts["database"], opts["password"])

        # Lazy import to avoid hard dependency when the filesystem backend is used
        try:
            from .backends.redis import RedisCacheBackend
        except ImportError as e:
            logger.error(
                "Redis backend selected but redis client is not installed",
                extra={"package": "redis>=5.0.0", "error": str(e)},
            )
            raise BackendUnavailableError(
                "redis",
                details={"package": "redis>=5.0.0", "error": str(e)},
            ) from e

        try:
            backend = RedisCacheBackend(
                redis_url=url,
                namespace=opts["namespace"],
                default_ttl=CACHE_TTL if ttl is None else ttl,
                socket_timeout=opts["timeout"] or None,
            )
        except Exception as e:
            logger.error(
                "Failed to create Redis backend for %s: %s",
                _mask_url(url),
                e,
                extra={"backend": "redis", "url": _mask_url(url), "error": str(e)},
                exc_info=True,
            )
            raise BackendUnavailableError(
                "redis",
                details={"url": _mask_url(url), "error": str(e)},
            ) from e

        try:
            backend.ping()
        except VaultCacheError:
            # Already logged by the backend
            backend.close()
            raise

        logger.debug("Redis backend connected to %s", _mask_url(url))
        return backend


_factory: BackendFactory | None = None


def get_backend_factory() -> BackendFactory:
    """
    Return the process-wide factory, creating it on first use.

    Shared mutable state: initialized lazily here, dropped only by
    reset_backend_factory().
    """
    global _factory

    if _factory is None:
        _factory = BackendFactory()
        logger.debug("Initialized backend factory")

    return _factory


def reset_backend_factory() -> None:
    """
    Drop the process-wide factory.

    Backends already handed out are not closed. Only use this in tests.
    """
    global _factory
    _factory = None
    logger.debug("Reset backend factory")
