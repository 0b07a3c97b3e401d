"""Key/blob persistence for tracker state."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Mapping, Optional, Protocol

DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"

COMPLETED_DAYS_KEY = "completed_days"
CURRENT_SEGMENTS_KEY = "current_segments"
ACCELERATED_KEY = "accelerated"
DELIVERED_NOTIFICATIONS_KEY = "delivered_notifications"

UPSERT_BLOB = """
INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?)
ON CONFLICT(key) DO UPDATE SET
    value = excluded.value,
    updated_at = excluded.updated_at
"""


class PersistenceGateway(Protocol):
    def save(self, key: str, blob: bytes) -> None: ...

    def load(self, key: str) -> Optional[bytes]: ...

    def save_many(self, blobs: Mapping[str, bytes]) -> None: ...


class MemoryBlobStore:
    """Dictionary-backed store, handy for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    def save(self, key: str, blob: bytes) -> None:
        self._blobs[key] = bytes(blob)

    def load(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    def save_many(self, blobs: Mapping[str, bytes]) -> None:
        self._blobs.update({key: bytes(blob) for key, blob in blobs.items()})


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row
    initialize_schema(conn)
    return conn


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS blobs (
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )


class SQLiteBlobStore:
    """Stores each key as one row; the tick thread may read and write too."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._conn = open_database(self.path, check_same_thread=False)
        self._lock = threading.Lock()

    def save(self, key: str, blob: bytes) -> None:
        with self._lock:
            self._conn.execute(
                UPSERT_BLOB, (key, sqlite3.Binary(blob), datetime.now().strftime(DATETIME_FMT))
            )

    def save_many(self, blobs: Mapping[str, bytes]) -> None:
        """Write every key in one transaction; on failure none is written."""
        updated_at = datetime.now().strftime(DATETIME_FMT)
        with self._lock:
            self._conn.execute("BEGIN")
            try:
                self._conn.executemany(
                    UPSERT_BLOB,
                    (
                        (key, sqlite3.Binary(blob), updated_at)
                        for key, blob in blobs.items()
                    ),
                )
            except Exception:
                self._conn.execute("ROLLBACK")
                raise
            self._conn.execute("COMMIT")

    def load(self, key: str) -> Optional[bytes]:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM blobs WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return bytes(row["value"])

    def close(self) -> None:
        with self._lock:
            self._conn.close()


@contextmanager
def blob_store(path: Path) -> Iterator[SQLiteBlobStore]:
    store = SQLiteBlobStore(path)
    try:
        yield store
    finally:
        store.close()
