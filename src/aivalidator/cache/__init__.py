"""Cache stores for validated results."""

from aivalidator.cache.base import CacheStore, build_cache_key
from aivalidator.cache.memory import MemoryCacheStore
from aivalidator.cache.sqlite import SqliteCacheStore
from aivalidator.config import Config
from aivalidator.errors import ConfigurationError


def get_cache_store(config: Config) -> CacheStore:
    """Create the cache store named by cache.store (memory when unset)."""
    store = (config.cache.store or "memory").lower()
    if store == "memory":
        return MemoryCacheStore()
    if store == "sqlite":
        return SqliteCacheStore(config.cache.path)
    raise ConfigurationError(f"Cache store [{config.cache.store}] is not supported.")


__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "SqliteCacheStore",
    "build_cache_key",
    "get_cache_store",
]
