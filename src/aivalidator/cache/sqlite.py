"""SQLite-backed cache store."""

from __future__ import annotations

import pickle
import sqlite3
import time
from contextlib import closing
from pathlib import Path
from typing import Any, Callable, Optional

from aivalidator.cache.base import CacheStore

SCHEMA_SQL = """
-- Cached validation results, pickled
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    expires_at REAL,
    payload BLOB NOT NULL
);

-- Index for purging expired entries
CREATE INDEX IF NOT EXISTS idx_cache_entries_expires_at ON cache_entries(expires_at);
"""


class SqliteCacheStore(CacheStore):
    """
    Cache store persisted to an SQLite file.

    Opens one connection per operation so the store can be shared across
    threads. Expiry uses wall-clock time since entries outlive the process.

    Payloads are pickled and unpickled on read, so the database file must
    only be writable by trusted users. Values that cannot be pickled
    (e.g. instances of classes defined inside a function) raise on put().
    """

    def __init__(self, db_path: Path, clock: Callable[[], float] = time.time):
        self.db_path = Path(db_path)
        self._clock = clock
        self._initialized = False

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        """Open a connection, creating the schema on first use."""
        self._ensure_directory()
        conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        if not self._initialized:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
            self._initialized = True
        return conn

    def get(self, key: str) -> Optional[Any]:
        with closing(self.connect()) as conn:
            row = conn.execute(
                "SELECT expires_at, payload FROM cache_entries WHERE key = ?", (key,)
            ).fetchone()
            if row is None:
                return None
            expires_at, payload = row
            if expires_at is not None and expires_at <= self._clock():
                conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
                conn.commit()
                return None
        return pickle.loads(payload)

    def put(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if ttl is not None and ttl <= 0:
            self.forget(key)
            return
        expires_at = self._clock() + ttl if ttl is not None else None
        payload = pickle.dumps(value)
        with closing(self.connect()) as conn:
            conn.execute(
                """
                INSERT INTO cache_entries (key, expires_at, payload)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    expires_at = excluded.expires_at,
                    payload = excluded.payload
                """,
                (key, expires_at, sqlite3.Binary(payload)),
            )
            conn.commit()

    def forget(self, key: str) -> None:
        with closing(self.connect()) as conn:
            conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
            conn.commit()

    def clear(self) -> None:
        with closing(self.connect()) as conn:
            conn.execute("DELETE FROM cache_entries")
            conn.commit()

    def purge_expired(self) -> int:
        """Delete expired entries, returning how many were removed."""
        with closing(self.connect()) as conn:
            cursor = conn.execute(
                "DELETE FROM cache_entries WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (self._clock(),),
            )
            conn.commit()
            return cursor.rowcount
