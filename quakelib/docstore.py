"""SQLite-backed JSON document store.

A small document-database stand-in: documents live in named
collections and are addressed by id. ``set`` overwrites a document in
place (the "latest" snapshot); ``add`` appends a new document under a
generated id (the run history).

Usage::

    from quakelib.docstore import DocumentStore

    with DocumentStore("data/outlook.db") as store:
        store.set("analysis_results", "latest", snapshot)
        store.add("update_history", {"status": "SUCCESS", ...})
        store.get("analysis_results", "latest")
"""

import json
import sqlite3
import time
import uuid
from pathlib import Path


class DocumentStore:
    """JSON documents grouped into collections, stored in one SQLite file.

    Args:
        db_path: Path to the SQLite database file. Parent directories
            are created if missing.
    """

    def __init__(self, db_path: str | Path = "outlook.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                collection TEXT NOT NULL,
                doc_id TEXT NOT NULL,
                data TEXT NOT NULL,
                written_at REAL NOT NULL,
                UNIQUE (collection, doc_id)
            )
        """)
        self._conn.commit()

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        """Create or replace the document *doc_id* in *collection*."""
        self._conn.execute(
            """INSERT INTO documents (collection, doc_id, data, written_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT (collection, doc_id)
               DO UPDATE SET data = excluded.data, written_at = excluded.written_at""",
            (collection, doc_id, json.dumps(data, ensure_ascii=False), time.time()),
        )
        self._conn.commit()

    def add(self, collection: str, data: dict) -> str:
        """Append a document under a fresh id and return that id."""
        doc_id = uuid.uuid4().hex
        self._conn.execute(
            """INSERT INTO documents (collection, doc_id, data, written_at)
               VALUES (?, ?, ?, ?)""",
            (collection, doc_id, json.dumps(data, ensure_ascii=False), time.time()),
        )
        self._conn.commit()
        return doc_id

    def get(self, collection: str, doc_id: str) -> dict | None:
        """Return the document, or None if it does not exist."""
        row = self._conn.execute(
            "SELECT data FROM documents WHERE collection = ? AND doc_id = ?",
            (collection, doc_id),
        ).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def list(self, collection: str) -> list[dict]:
        """All documents in *collection*, oldest first."""
        rows = self._conn.execute(
            "SELECT data FROM documents WHERE collection = ? ORDER BY seq",
            (collection,),
        ).fetchall()
        return [json.loads(r[0]) for r in rows]

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
