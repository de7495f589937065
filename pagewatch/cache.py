from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class KeyValueCache(ABC):
    """Abstract base class for durable key to text mappings.

    put() on an existing key replaces the value."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if there is none."""

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def close(self) -> None:
        """Release resources."""


class SqliteCache(KeyValueCache):
    """Key value cache stored in a single sqlite3 table.

    Use ":memory:" as the path for a store that lives only as long as the object."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._conn = sqlite3.connect(path)
        with self._conn:
            self._conn.execute("CREATE TABLE IF NOT EXISTS kv (key TEXT UNIQUE, value TEXT)")

    def get(self, key: str) -> Optional[str]:
        try:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            logger.warning("failed to read from cache", path=self._path, key=key, error=str(exc))
            return None
        return row[0] if row else None

    def put(self, key: str, value: str) -> None:
        with self._conn:
            self._conn.execute("REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value))

    def close(self) -> None:
        self._conn.close()
