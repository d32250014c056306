"""The key index — the list of record ids known to exist.

Persisted as one UTF-8 JSON array under ``fog_keys``. Every append
rewrites the whole array. Appends through one KeyIndex are serialized
by a lock, so threads sharing a store never lose an id. Separate
clients appending at the same time still race and the later write
wins; the storage contract offers no compare-and-swap.
"""

from __future__ import annotations

import json
import logging
import threading

from fogstore.backends import BlobStorage
from fogstore.errors import StorageUnavailableError

logger = logging.getLogger("fogstore.index")

INDEX_KEY = "fog_keys"


class KeyIndex:
    """Append-only, insertion-ordered id list."""

    def __init__(self, storage: BlobStorage, key: str = INDEX_KEY) -> None:
        self.storage = storage
        self.key = key
        self._lock = threading.Lock()

    def list(self) -> list[str]:
        """Current ids. Empty on any absence or parse fault, never raises."""
        if not self.storage.is_available():
            logger.error("Storage unavailable, index read skipped")
            return []
        raw = self.storage.get_data(self.key)
        if not raw:
            return []
        try:
            text = raw.decode("utf-8")
            if not text.strip():
                return []
            ids = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Error parsing index %s: %s", self.key, exc)
            return []
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            logger.warning("Index %s is not a list of string ids", self.key)
            return []
        return ids

    def append(self, record_id: str) -> bool:
        """Append an id and write the full list back.

        Ids already present are skipped. Returns True when the index
        was written. Raises StorageUnavailableError when the liveness
        probe fails.
        """
        if not self.storage.is_available():
            raise StorageUnavailableError("Storage unavailable, cannot append to index")
        with self._lock:
            ids = self.list()
            if record_id in ids:
                logger.debug("Id %s already indexed", record_id)
                return False
            ids.append(record_id)
            self.storage.set_data(self.key, json.dumps(ids).encode("utf-8"))
        return True
