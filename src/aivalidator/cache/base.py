"""Base cache store interface and key derivation."""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


def build_cache_key(prompt: str, rules: Mapping[str, Any], prefix: str = "ai_validator:") -> str:
    """
    Derive the cache key for a prompt + rule set combination.

    The rule set is serialized canonically (sorted keys), so equal rule
    sets always map to the same key and different ones never collide in
    practice.
    """
    serialized = json.dumps(rules, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256((prompt + serialized).encode("utf-8")).hexdigest()
    return f"{prefix}{digest}"


class CacheStore(ABC):
    """
    Key/value store with per-entry TTL.

    Implementations must be safe to share between threads. A miss or an
    expired entry returns None; it is never an error.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def put(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value; ttl in seconds, None keeps it until forgotten, <= 0 stores nothing."""
        ...

    @abstractmethod
    def forget(self, key: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...
