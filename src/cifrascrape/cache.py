"""Read-through cache for scrape results, keyed by page URL.

Entries are the JSON form of a result (``result.to_dict()``) plus the time
they were stored.  An entry older than ``ttl`` seconds counts as a miss and
is dropped.  Both backends serialise access with a lock, so they can be
shared between threads; concurrent writers to one key simply overwrite
each other.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path

from .config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600.0


class ResultCache(ABC):
    """Abstract URL → payload cache with a freshness window."""

    def __init__(self, ttl: float = DEFAULT_TTL, clock=time.time):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()

    def _is_fresh(self, stored_at: float) -> bool:
        return self._clock() - stored_at < self.ttl

    @abstractmethod
    def get(self, url: str) -> dict | None:
        """Return the cached payload for *url*, or None when missing or stale."""

    @abstractmethod
    def set(self, url: str, payload: dict) -> None:
        """Store *payload* for *url*, replacing any previous entry."""

    def close(self) -> None:
        """Release any resources held by the backend."""


class MemoryCache(ResultCache):
    """Process-local cache.

    Stale entries are swept on every write, so the map holds at most the
    entries written within the last ``ttl`` seconds.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock=time.time):
        super().__init__(ttl, clock)
        self._entries: dict[str, tuple[dict, float]] = {}

    def get(self, url: str) -> dict | None:
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                return None
            payload, stored_at = entry
            if not self._is_fresh(stored_at):
                del self._entries[url]
                return None
            return payload

    def set(self, url: str, payload: dict) -> None:
        with self._lock:
            self._sweep()
            self._entries[url] = (payload, self._clock())

    def _sweep(self) -> None:
        stale = [
            key for key, (_, stored_at) in self._entries.items() if not self._is_fresh(stored_at)
        ]
        for key in stale:
            del self._entries[key]


class SqliteCache(ResultCache):
    """Cache persisted in a SQLite table, shared by every process using the file.

    Usage::

        cache = SqliteCache(Path("~/.cache/cifrascrape.db").expanduser())
        cache.set(url, result.to_dict())
    """

    _SCHEMA = """
        CREATE TABLE IF NOT EXISTS scrape_cache (
            url       TEXT PRIMARY KEY,
            payload   TEXT NOT NULL,
            stored_at REAL NOT NULL
        )
    """

    def __init__(self, path: Path | str, ttl: float = DEFAULT_TTL, clock=time.time):
        super().__init__(ttl, clock)
        path = Path(path)
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.execute(self._SCHEMA)
        self._conn.commit()

    def get(self, url: str) -> dict | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT payload, stored_at FROM scrape_cache WHERE url = ?", (url,)
            ).fetchone()
            if row is None:
                return None
            payload, stored_at = row
            if not self._is_fresh(stored_at):
                self._conn.execute("DELETE FROM scrape_cache WHERE url = ?", (url,))
                self._conn.commit()
                return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cache entry for %s", url)
            return None

    def set(self, url: str, payload: dict) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO scrape_cache (url, payload, stored_at) VALUES (?, ?, ?)",
                (url, json.dumps(payload, ensure_ascii=False), self._clock()),
            )
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def build_cache(settings: Settings | None = None) -> ResultCache:
    """SQLite cache when ``cache_path`` is configured, in-memory otherwise."""
    settings = settings or default_settings
    if settings.cache_path:
        return SqliteCache(Path(settings.cache_path).expanduser(), ttl=settings.cache_ttl)
    return MemoryCache(ttl=settings.cache_ttl)
