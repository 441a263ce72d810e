"""SQLite-backed response cache with TTL expiration.

Keeps the raw catalog feeds between runs so that a re-run inside the TTL
window (a retried workflow, a local report rebuild) does not hit the
open-data API again.

Usage::

    from quakelib.cache import ResponseCache

    with ResponseCache(db_path="data/cache.db", ttl=3600) as cache:
        key = cache.make_key(url, params)
        text = cache.get(key)
        if text is None:
            text = download(url, params)
            cache.put(key, text)
"""

import hashlib
import json
import sqlite3
import time
from pathlib import Path


DEFAULT_TTL = 6 * 3600  # feeds are refreshed a few times a day


class ResponseCache:
    """SQLite HTTP response cache with lazy TTL expiry.

    Args:
        db_path: Path to the SQLite database file. Parent directories
            are created if missing.
        ttl: Time-to-live in seconds. Older entries are treated as
            missing and deleted on access.
    """

    def __init__(self, db_path: str | Path = "cache.db", ttl: int = DEFAULT_TTL):
        self.db_path = Path(db_path)
        self.ttl = ttl
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS responses (
                key TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                status_code INTEGER NOT NULL DEFAULT 200,
                cached_at REAL NOT NULL
            )
        """)
        self._conn.commit()

    def get(self, key: str):
        """Return the cached value for *key*, or None if missing or expired."""
        row = self._conn.execute(
            "SELECT data, cached_at FROM responses WHERE key = ?",
            (key,),
        ).fetchone()
        if row is None:
            return None
        data_json, cached_at = row
        if time.time() - cached_at > self.ttl:
            self._conn.execute("DELETE FROM responses WHERE key = ?", (key,))
            self._conn.commit()
            return None
        return json.loads(data_json)

    def put(self, key: str, data, status_code: int = 200):
        """Store any JSON-serializable value under *key*."""
        self._conn.execute(
            """INSERT OR REPLACE INTO responses
               (key, data, status_code, cached_at)
               VALUES (?, ?, ?, ?)""",
            (key, json.dumps(data, ensure_ascii=False), status_code, time.time()),
        )
        self._conn.commit()

    def clear_expired(self) -> int:
        """Delete expired entries and return how many were removed."""
        cutoff = time.time() - self.ttl
        cursor = self._conn.execute(
            "DELETE FROM responses WHERE cached_at < ?", (cutoff,)
        )
        self._conn.commit()
        return cursor.rowcount

    def count(self) -> int:
        """Number of stored entries, expired ones included."""
        return self._conn.execute("SELECT COUNT(*) FROM responses").fetchone()[0]

    @staticmethod
    def make_key(url: str, params: dict | None = None) -> str:
        """SHA-256 key over the URL and its params (sorted by name).

        Query values such as the authorization code are part of the key
        but never stored in clear text.
        """
        raw = url
        if params:
            raw += json.dumps(params, sort_keys=True)
        return hashlib.sha256(raw.encode()).hexdigest()

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
