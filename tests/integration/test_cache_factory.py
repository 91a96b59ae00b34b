"""
vaultcache — Cache Factory Integration Tests

Tests backend construction from configuration, the factory singleton, the
named cache registry and, when a server is reachable, a facade over Redis.
"""

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from vaultcache.cache import (
    BackendFactory,
    Cache,
    close_all_caches,
    create_cache,
    get_backend_factory,
    get_cache,
    list_cache_instances,
    reset_backend_factory,
)
from vaultcache.cache.backends.filesystem import FilesystemCacheBackend
from vaultcache.cache.factory import CACHE_TTL, _cache_directory, build_redis_url
from vaultcache.config import BackendKind, CacheConfig
from vaultcache.errors import BackendUnavailableError, InvalidTtlError


class TestBackendFactory:
    """Test suite for BackendFactory."""

    def test_create_filesystem_backend(self, cache_dir: str) -> None:
        config = CacheConfig(tmp_path=cache_dir, dirname="store", namespace="ns", duration="+2 minutes")
        backend = BackendFactory().create(config)
        try:
            assert isinstance(backend, FilesystemCacheBackend)
            assert backend.directory == Path(cache_dir) / "store" / "ns"
            assert backend.default_ttl == 120
        finally:
            backend.close()

    def test_filesystem_defaults(self, tmp_path: Path) -> None:
        backend = BackendFactory().create_filesystem_backend({"tmp_path": str(tmp_path)})
        try:
            assert backend.namespace == "persistent"
            assert backend.default_ttl == CACHE_TTL
            assert backend.directory == tmp_path / "persistent" / "persistent"
        finally:
            backend.close()

    def test_none_options_fall_back_to_defaults(self, tmp_path: Path) -> None:
        backend = BackendFactory().create_filesystem_backend(
            {"tmp_path": str(tmp_path), "namespace": None, "ttl": None}
        )
        try:
            assert backend.namespace == "persistent"
            assert backend.default_ttl == CACHE_TTL
        finally:
            backend.close()

    def test_invalid_ttl_option(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidTtlError):
            BackendFactory().create_filesystem_backend({"tmp_path": str(tmp_path), "ttl": "soon"})

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="Requires POSIX permissions as non-root")
    def test_unwritable_directory(self, tmp_path: Path) -> None:
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0o500)
        try:
            with pytest.raises(BackendUnavailableError) as exc_info:
                BackendFactory().create(CacheConfig(tmp_path=str(locked)))
        finally:
            locked.chmod(0o700)

        assert exc_info.value.details["backend"] == "filesystem"
        assert exc_info.value.status_code == 503

    def test_directory_creation_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(BackendUnavailableError) as exc_info:
            BackendFactory().create(CacheConfig(tmp_path=str(blocker)))

        assert exc_info.value.__cause__ is not None

    def test_redis_ping_failure(self) -> None:
        config = CacheConfig(backend=BackendKind.REDIS, server="redis.invalid", port=6390, database=2)

        with patch("vaultcache.cache.backends.redis.Redis.from_url") as from_url:
            client = from_url.return_value
            client.ping.side_effect = RedisConnectionError("Connection refused")

            with pytest.raises(BackendUnavailableError):
                BackendFactory().create(config)

        assert from_url.call_args.kwargs["url"] == "redis://redis.invalid:6390/2"
        client.close.assert_called_once()

    def test_redis_backend_with_password_and_timeout(self) -> None:
        config = CacheConfig(backend=BackendKind.REDIS, password="p@ss/word", timeout=5, duration=30)

        with patch("vaultcache.cache.backends.redis.Redis.from_url") as from_url:
            backend = BackendFactory().create(config)

        assert from_url.call_args.kwargs["url"] == "redis://:p%40ss%2Fword@127.0.0.1:6379/0"
        assert from_url.call_args.kwargs["socket_timeout"] == 5
        assert backend.default_ttl == 30


class TestCacheDirectory:
    """Filesystem working directory resolution."""

    def test_root_tmp_path_keeps_root(self) -> None:
        assert _cache_directory("/", "store") == Path("/store")

    def test_trailing_separator_on_tmp_path(self, tmp_path: Path) -> None:
        assert _cache_directory(f"{tmp_path}/", "store") == tmp_path / "store"

    def test_dirname_cannot_escape_tmp_path(self, tmp_path: Path) -> None:
        assert _cache_directory(str(tmp_path), "/store/") == tmp_path / "store"


class TestBuildRedisUrl:
    """Test suite for build_redis_url()."""

    def test_without_password(self) -> None:
        assert build_redis_url("localhost", 6379, 0) == "redis://localhost:6379/0"

    def test_empty_password_is_omitted(self) -> None:
        assert build_redis_url("localhost", 6379, 1, "") == "redis://localhost:6379/1"

    def test_password_is_escaped(self) -> None:
        assert build_redis_url("h", 1, 2, "a:b@c") == "redis://:a%3Ab%40c@h:1/2"


class TestFactorySingleton:
    """Process-wide factory lifecycle."""

    def test_get_returns_same_instance(self) -> None:
        assert get_backend_factory() is get_backend_factory()

    def test_reset_drops_instance(self) -> None:
        first = get_backend_factory()
        reset_backend_factory()
        assert get_backend_factory() is not first


class TestCacheRegistry:
    """Named Cache facades."""

    @pytest.fixture(autouse=True)
    def isolated_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Point settings-based caches at a temporary directory."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CACHE_TMP_PATH", str(tmp_path / "settings"))
        monkeypatch.delenv("CACHE_BACKEND", raising=False)

    def test_create_named_cache(self, fs_config: CacheConfig) -> None:
        cache = create_cache(fs_config, name="sessions")

        assert isinstance(cache, Cache)
        assert get_cache("sessions") is cache
        assert list_cache_instances() == ["sessions"]

        cache.write("sid", {"user": 1})
        assert get_cache("sessions").read("sid") == {"user": 1}

    def test_create_existing_name_returns_same_instance(self, fs_config: CacheConfig) -> None:
        first = create_cache(fs_config, name="shared")
        assert create_cache(fs_config.model_copy(update={"namespace": "other"}), name="shared") is first

    def test_default_cache_from_settings(self, tmp_path: Path) -> None:
        cache = get_cache()

        assert list_cache_instances() == ["default"]
        assert cache.config.backend == BackendKind.FILESYSTEM
        assert cache.backend.directory.is_relative_to(tmp_path / "settings")

    def test_close_all_clears_registry(self, fs_config: CacheConfig) -> None:
        create_cache(fs_config, name="one")
        create_cache(fs_config.model_copy(update={"namespace": "two"}), name="two")

        close_all_caches()

        assert list_cache_instances() == []

    def test_close_all_continues_after_failure(self, fs_config: CacheConfig) -> None:
        failing = create_cache(fs_config, name="failing")
        create_cache(fs_config.model_copy(update={"namespace": "ok"}), name="ok")

        with patch.object(failing, "close", side_effect=OSError("disk gone")):
            close_all_caches()

        assert list_cache_instances() == []


class TestRedisCacheLive:
    """Facade over a live Redis server."""

    @pytest.fixture
    def cache(self, redis_config: CacheConfig) -> Generator[Cache, None, None]:
        facade = Cache(redis_config.model_copy(update={"prefix": "it:"}))
        facade.clear()
        yield facade
        facade.clear()
        facade.close()

    def test_round_trip(self, cache: Cache) -> None:
        assert cache.write("user", {"name": "Ada"}, ttl="+1 minute") is True
        assert cache.read("user") == {"name": "Ada"}
        assert cache.check("user") is True

    def test_batch(self, cache: Cache) -> None:
        assert cache.set_multiple({"a": 1, "b": 2}) is True
        assert cache.get_multiple(["a", "b", "c"], default="D") == {"a": 1, "b": 2, "c": "D"}
        assert cache.delete_multiple(["a", "b"]) is True

    def test_stored_value_is_encrypted(self, cache: Cache) -> None:
        cache.write("secret", "4111-1111")
        raw = cache.backend.get("it:secret")

        assert isinstance(raw, str)
        assert "4111" not in raw
