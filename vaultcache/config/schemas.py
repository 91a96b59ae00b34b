"""
vaultcache — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
Every recognized option is enumerated here together with its default; unknown
options and unknown backend kinds are rejected at construction time.
"""

from collections.abc import Mapping
from datetime import timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError, InvalidTtlError


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class BackendKind(str, Enum):
    """Supported storage backends."""

    FILESYSTEM = "filesystem"
    REDIS = "redis"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CacheConfig(BaseModel):
    """
    Cache facade configuration.

    Immutable after construction. Redis settings are only forwarded to the
    backend when ``backend`` is ``redis``.
    """

    backend: BackendKind = Field(default=BackendKind.FILESYSTEM, description="Storage backend to use")
    duration: int | timedelta | str | None = Field(
        default=None,
        description="Default TTL: seconds, timedelta or relative string like '+1 hour' (None = backend default)",
    )
    serialize: bool = Field(default=True, description="Serialize values before storing")
    encrypt: bool = Field(default=True, description="Encrypt values (only effective with a crypto_salt)")
    crypto_salt: str | None = Field(default=None, description="Secret the encryption key is derived from")
    prefix: str | None = Field(default=None, description="Prefix prepended to every key")
    namespace: str | None = Field(default=None, description="Backend namespace")

    # Filesystem-specific settings
    dirname: str | None = Field(default=None, description="Cache subdirectory under tmp_path")
    tmp_path: str | None = Field(default=None, description="Base directory for the filesystem backend")

    # Redis-specific settings (only used when backend=redis)
    server: str = Field(default="127.0.0.1", description="Redis host")
    port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    timeout: int = Field(default=0, ge=0, description="Redis socket timeout in seconds (0 = none)")
    database: int = Field(default=0, ge=0, description="Redis database index")
    password: str | None = Field(default=None, description="Redis password")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: int | timedelta | str | None) -> int | timedelta | str | None:
        """Reject durations that can never resolve to a legal TTL."""
        # Lazy import: the cache package imports this module
        from ..cache.ttl import TtlParser

        try:
            TtlParser().to_seconds(v)
        except InvalidTtlError as e:
            raise ValueError(e.message) from e
        return v

    @property
    def with_serialization(self) -> bool:
        return self.serialize

    @property
    def with_encryption(self) -> bool:
        """Encryption is silently disabled when no salt is configured."""
        return self.encrypt and bool(self.crypto_salt)

    def get_options(self) -> dict[str, Any]:
        """
        Build the option map handed to the backend factory.

        Returns:
            Options relevant to the configured backend only
        """
        options: dict[str, Any] = {"ttl": self.duration}
        if self.namespace is not None:
            options["namespace"] = self.namespace

        if self.dirname is not None:
            options["dirname"] = self.dirname

        if self.tmp_path is not None:
            options["tmp_path"] = self.tmp_path

        if self.backend == BackendKind.REDIS:
            options.update(
                {
                    "server": self.server,
                    "port": self.port,
                    "timeout": self.timeout,
                    "database": self.database,
                    "password": self.password,
                }
            )

        return options

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CacheConfig":
        """
        Build a validated config from loosely typed data.

        Raises:
            ConfigurationError: If an option is unknown or invalid
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid cache configuration",
                details={"validation_errors": e.errors(include_url=False, include_context=False)},
            ) from e


class VaultCacheSettings(BaseModel):
    """Root settings loaded from the environment."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(frozen=True)
