"""
vaultcache — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from vaultcache.config import BackendKind, CacheConfig

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"

TEST_SALT = "def0000077a07f6739564bffe80f095089e42e8792148231ed0906152b957f85"


# Redis availability checker
def is_redis_available() -> bool:
    """Check if Redis server is available for testing."""
    import socket

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("localhost", 6379))
        sock.close()
        return result == 0
    except OSError:
        return False


@pytest.fixture
def fixed_clock() -> Any:
    """Clock frozen at a known instant (mid-month, non-leap year)."""
    instant = datetime(2023, 1, 15, 12, 0, 0, tzinfo=UTC)
    return lambda: instant


@pytest.fixture
def cache_dir(tmp_path: Path) -> str:
    """Create a temporary base directory for the filesystem backend."""
    base = tmp_path / "cache"
    base.mkdir()
    return str(base)


@pytest.fixture
def fs_config(cache_dir: str) -> CacheConfig:
    """Filesystem config with serialization and encryption enabled."""
    return CacheConfig(
        tmp_path=cache_dir,
        namespace="test",
        crypto_salt=TEST_SALT,
    )


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset factory, registry and settings singletons after each test."""
    yield
    from vaultcache.cache.factory import reset_backend_factory
    from vaultcache.cache.registry import close_all_caches
    from vaultcache.config import reset_config

    close_all_caches()
    reset_backend_factory()
    reset_config()


@pytest.fixture
def redis_config() -> CacheConfig:
    """Redis config on database 15; skips the test when no server is reachable."""
    if not is_redis_available():
        pytest.skip("Redis not available")
    return CacheConfig(
        backend=BackendKind.REDIS,
        namespace="vaultcache-test",
        database=15,
        timeout=2,
        crypto_salt=TEST_SALT,
    )
