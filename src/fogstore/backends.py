"""Generic blob storage — the contract the fog store is layered on.

The store never talks to anything but this interface. Keys are plain
strings and values are opaque bytes with whole-value replace semantics.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from abc import ABC, abstractmethod

logger = logging.getLogger("fogstore.backends")


class BlobStorage(ABC):
    """Key/value blob contract.

    ``get_data`` must return ``b""`` for an absent key and never raise
    for absence.
    """

    @abstractmethod
    def get_data(self, key: str) -> bytes:
        ...

    @abstractmethod
    def set_data(self, key: str, value: bytes) -> None:
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Liveness probe checked before reads."""
        ...

    def close(self) -> None:
        return


class InMemoryBlobStorage(BlobStorage):
    """Process-local storage. Used by tests and development mode."""

    def __init__(self, available: bool = True) -> None:
        self._blobs: dict[str, bytes] = {}
        self.available = available

    def get_data(self, key: str) -> bytes:
        return self._blobs.get(key, b"")

    def set_data(self, key: str, value: bytes) -> None:
        self._blobs[key] = bytes(value)

    def is_available(self) -> bool:
        return self.available


class SQLiteBlobStorage(BlobStorage):
    """Persistent storage in a single ``blobs`` table."""

    def __init__(self, path: str = "db/fogstore.db") -> None:
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.path = path
        self.db = sqlite3.connect(path, check_same_thread=False)
        # One connection shared by the gateway threadpool.
        self._lock = threading.Lock()
        self._init()

    def _init(self) -> None:
        self.db.execute(
            """CREATE TABLE IF NOT EXISTS blobs(
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL
        )"""
        )
        self.db.commit()

    def get_data(self, key: str) -> bytes:
        with self._lock:
            cur = self.db.execute("SELECT value FROM blobs WHERE key=?", (key,))
            row = cur.fetchone()
        if not row:
            return b""
        return bytes(row[0])

    def set_data(self, key: str, value: bytes) -> None:
        with self._lock:
            self.db.execute(
                "INSERT INTO blobs(key,value) VALUES(?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, sqlite3.Binary(value)),
            )
            self.db.commit()

    def is_available(self) -> bool:
        try:
            with self._lock:
                self.db.execute("SELECT 1")
        except sqlite3.Error as exc:
            logger.error("SQLite storage at %s unavailable: %s", self.path, exc)
            return False
        return True

    def close(self) -> None:
        self.db.close()


def open_storage(db_path: str) -> BlobStorage:
    """Empty path = in-memory storage."""
    if not db_path:
        return InMemoryBlobStorage()
    return SQLiteBlobStorage(db_path)
