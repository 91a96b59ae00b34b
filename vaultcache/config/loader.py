"""
vaultcache — Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton settings instance for the process.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import VaultCacheSettings

logger = logging.getLogger(__name__)

_config_instance: VaultCacheSettings | None = None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_duration(name: str) -> int | str | None:
    """Digits become seconds, anything else is kept as a relative TTL string."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    return int(raw) if raw.isdigit() else raw


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> VaultCacheSettings:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated VaultCacheSettings instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    try:
        cache: dict[str, Any] = {
            "backend": os.getenv("CACHE_BACKEND", "filesystem"),
            "duration": _env_duration("CACHE_DURATION"),
            "serialize": _env_bool("CACHE_SERIALIZE", True),
            "encrypt": _env_bool("CACHE_ENCRYPT", True),
            "crypto_salt": os.getenv("CACHE_CRYPTO_SALT") or None,
            "prefix": os.getenv("CACHE_PREFIX") or None,
            "namespace": os.getenv("CACHE_NAMESPACE") or None,
            "dirname": os.getenv("CACHE_DIRNAME") or None,
            "tmp_path": os.getenv("CACHE_TMP_PATH") or None,
            "server": os.getenv("REDIS_SERVER", "127.0.0.1"),
            "port": int(os.getenv("REDIS_PORT", "6379")),
            "timeout": int(os.getenv("REDIS_TIMEOUT", "0")),
            "database": int(os.getenv("REDIS_DATABASE", "0")),
            "password": os.getenv("REDIS_PASSWORD") or None,
        }
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid numeric cache setting: {e}",
            details={"error": str(e)},
        ) from e

    config_dict = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "cache": cache,
    }

    try:
        _config_instance = VaultCacheSettings(**config_dict)
    except ValidationError as e:
        logger.error(
            "Configuration validation failed: %s",
            e,
            extra={"validation_errors": e.errors(include_url=False, include_context=False)},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors(include_url=False, include_context=False)},
        ) from e

    if _config_instance.cache.encrypt and not _config_instance.cache.with_encryption:
        logger.warning("Encryption requested but CACHE_CRYPTO_SALT is empty; values will be stored unencrypted")

    logger.info(
        "Configuration loaded successfully (environment: %s)",
        _config_instance.environment.value,
        extra={
            "environment": _config_instance.environment.value,
            "cache_backend": _config_instance.cache.backend.value,
        },
    )
    return _config_instance


def get_config() -> VaultCacheSettings:
    """
    Get the current settings instance, loading it on first access.

    Returns:
        Current VaultCacheSettings instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> VaultCacheSettings:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded VaultCacheSettings instance
    """
    return load_config(env_file=env_file, reload=True)


def reset_config() -> None:
    """Drop the cached settings instance. Intended for tests."""
    global _config_instance
    _config_instance = None
