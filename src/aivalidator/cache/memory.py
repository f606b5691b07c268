"""In-process cache store."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from aivalidator.cache.base import CacheStore


class MemoryCacheStore(CacheStore):
    """Dictionary-backed store guarded by a lock, expiring on a monotonic clock."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Optional[float], Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at is not None and expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if ttl is not None and ttl <= 0:
            self.forget(key)
            return
        expires_at = self._clock() + ttl if ttl is not None else None
        with self._lock:
            self._entries[key] = (expires_at, value)

    def forget(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
