"""Tests for cache keys and cache stores."""

from __future__ import annotations

import pytest

from aivalidator.cache import MemoryCacheStore, SqliteCacheStore, build_cache_key, get_cache_store
from aivalidator.config import CacheSettings, Config
from aivalidator.errors import ConfigurationError
from aivalidator.schemas import TokenUsage, ValidationResult


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestBuildCacheKey:
    def test_deterministic_and_prefixed(self):
        rules = {"name": "required", "age": "integer"}
        key = build_cache_key("prompt", rules)
        assert key == build_cache_key("prompt", rules)
        assert key.startswith("ai_validator:")
        assert len(key) == len("ai_validator:") + 64

    def test_rule_order_does_not_matter(self):
        assert build_cache_key("p", {"a": "x", "b": "y"}) == build_cache_key("p", {"b": "y", "a": "x"})

    def test_differs_by_prompt_and_rules(self):
        base = build_cache_key("p", {"a": "required"})
        assert base != build_cache_key("q", {"a": "required"})
        assert base != build_cache_key("p", {"a": "required|string"})

    def test_custom_prefix(self):
        assert build_cache_key("p", {}, prefix="app:").startswith("app:")


class TestMemoryCacheStore:
    def test_put_get_forget(self):
        store = MemoryCacheStore()
        store.put("k", {"v": 1}, ttl=60)
        assert store.get("k") == {"v": 1}
        store.forget("k")
        assert store.get("k") is None

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        store = MemoryCacheStore(clock=clock)
        store.put("k", "value", ttl=10)

        clock.now += 9
        assert store.get("k") == "value"
        clock.now += 1
        assert store.get("k") is None
        assert len(store) == 0

    def test_no_ttl_keeps_forever(self):
        clock = FakeClock()
        store = MemoryCacheStore(clock=clock)
        store.put("k", "value")
        clock.now += 10**9
        assert store.get("k") == "value"

    def test_non_positive_ttl_stores_nothing(self):
        store = MemoryCacheStore()
        store.put("k", "value", ttl=0)
        assert store.get("k") is None

    def test_clear(self):
        store = MemoryCacheStore()
        store.put("a", 1)
        store.put("b", 2)
        store.clear()
        assert len(store) == 0


class TestSqliteCacheStore:
    def test_round_trips_validation_result(self, tmp_path):
        store = SqliteCacheStore(tmp_path / "nested" / "cache.sqlite")
        result = ValidationResult(
            success=True,
            data={"name": "John"},
            attempt_count=1,
            usage=TokenUsage(prompt_tokens=1, completion_tokens=2, total_tokens=3),
        )

        store.put("k", result, ttl=60)

        assert store.get("k") == result
        assert (tmp_path / "nested" / "cache.sqlite").exists()

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "cache.sqlite"
        SqliteCacheStore(path).put("k", [1, 2, 3])
        assert SqliteCacheStore(path).get("k") == [1, 2, 3]

    def test_expiry_and_purge(self, tmp_path):
        clock = FakeClock()
        store = SqliteCacheStore(tmp_path / "cache.sqlite", clock=clock)
        store.put("short", "a", ttl=5)
        store.put("long", "b", ttl=500)
        store.put("forever", "c")

        clock.now += 10
        assert store.purge_expired() == 1
        assert store.get("short") is None
        assert store.get("long") == "b"
        assert store.get("forever") == "c"

        clock.now += 1000
        assert store.get("long") is None

    def test_overwrite_and_clear(self, tmp_path):
        store = SqliteCacheStore(tmp_path / "cache.sqlite")
        store.put("k", "old")
        store.put("k", "new")
        assert store.get("k") == "new"
        store.clear()
        assert store.get("k") is None


class TestGetCacheStore:
    def test_memory_is_default(self):
        config = Config(cache=CacheSettings(enabled=True, store=None))
        assert isinstance(get_cache_store(config), MemoryCacheStore)

    def test_sqlite(self, tmp_path):
        config = Config(cache=CacheSettings(enabled=True, store="sqlite", path=tmp_path / "c.sqlite"))
        store = get_cache_store(config)
        assert isinstance(store, SqliteCacheStore)
        assert store.db_path == tmp_path / "c.sqlite"

    def test_unknown_store(self):
        with pytest.raises(ConfigurationError):
            get_cache_store(Config(cache=CacheSettings(store="redis")))
