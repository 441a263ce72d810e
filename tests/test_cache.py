"""Tests for quakelib.cache: SQLite response cache."""

import time

from quakelib.cache import ResponseCache


class TestPutGet:
    """Store and retrieve cached responses."""

    def test_put_and_get(self, tmp_path):
        """Basic round-trip: put a feed body, get it back."""
        with ResponseCache(db_path=tmp_path / "cache.db", ttl=3600) as cache:
            cache.put("k", "<Data><Earthquake/></Data>")
            assert cache.get("k") == "<Data><Earthquake/></Data>"

    def test_miss_returns_none(self, tmp_path):
        """Getting a non-existent key returns None."""
        with ResponseCache(db_path=tmp_path / "cache.db") as cache:
            assert cache.get("missing") is None

    def test_put_overwrites(self, tmp_path):
        """Putting the same key twice keeps one entry with the new value."""
        with ResponseCache(db_path=tmp_path / "cache.db") as cache:
            cache.put("k", "old")
            cache.put("k", "new")
            assert cache.get("k") == "new"
            assert cache.count() == 1

    def test_non_ascii_text_survives(self, tmp_path):
        """Chinese place names are stored intact."""
        with ResponseCache(db_path=tmp_path / "cache.db") as cache:
            cache.put("k", "臺北市")
            assert cache.get("k") == "臺北市"

    def test_persists_across_connections(self, tmp_path):
        """Entries survive closing and reopening the database."""
        db = tmp_path / "cache.db"
        with ResponseCache(db_path=db) as cache:
            cache.put("k", {"v": 1})
        with ResponseCache(db_path=db) as cache:
            assert cache.get("k") == {"v": 1}

    def test_creates_parent_dirs(self, tmp_path):
        """Missing parent directories are created."""
        db = tmp_path / "a" / "b" / "cache.db"
        with ResponseCache(db_path=db) as cache:
            cache.put("k", 1)
        assert db.exists()


class TestExpiry:
    """TTL-based expiration."""

    def test_expired_entry_returns_none(self, tmp_path):
        """An expired entry reads as missing and is deleted."""
        with ResponseCache(db_path=tmp_path / "cache.db", ttl=1) as cache:
            cache.put("k", "v")
            time.sleep(1.1)
            assert cache.get("k") is None
            assert cache.count() == 0

    def test_clear_expired(self, tmp_path):
        """Bulk cleanup removes only expired entries."""
        with ResponseCache(db_path=tmp_path / "cache.db", ttl=1) as cache:
            cache.put("old", "v")
            time.sleep(1.1)
            cache.put("fresh", "v")
            assert cache.clear_expired() == 1
            assert cache.get("fresh") == "v"


class TestMakeKey:
    """URL + params key hashing."""

    def test_deterministic(self):
        """Param order does not change the key."""
        a = ResponseCache.make_key("https://x/feed", {"b": 2, "a": 1})
        b = ResponseCache.make_key("https://x/feed", {"a": 1, "b": 2})
        assert a == b
        assert len(a) == 64

    def test_params_change_key(self):
        """Different params give different keys."""
        a = ResponseCache.make_key("https://x/feed", {"format": "XML"})
        b = ResponseCache.make_key("https://x/feed", {"format": "ZIP"})
        assert a != b

    def test_secret_not_in_key(self):
        """The authorization code is hashed, not stored."""
        key = ResponseCache.make_key("https://x/feed", {"Authorization": "CWA-SECRET"})
        assert "CWA-SECRET" not in key
