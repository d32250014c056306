"""The fog record store — CRUD over ``fog_<id>`` blobs.

The store is the single source of truth for records. Clients only ever
get frozen snapshots; every mutation re-persists the full blob.

Reads never raise. A missing, empty, or unparseable blob resolves to
None and is logged; ``list`` drops those ids silently.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from typing import Callable

from pydantic import ValidationError

from fogstore.backends import BlobStorage
from fogstore.errors import MalformedPayloadError, StorageUnavailableError
from fogstore.index import KeyIndex
from fogstore.models import FogRecord, RecordStats, RecordStatus

logger = logging.getLogger("fogstore.records")

RECORD_PREFIX = "fog_"

_BASE36 = string.digits + string.ascii_lowercase


def record_key(record_id: str) -> str:
    return f"{RECORD_PREFIX}{record_id}"


def new_record_id(now: float | None = None) -> str:
    """Epoch millis plus a random base36 suffix."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"{millis}-{suffix}"


def parse_record(record_id: str, raw: bytes) -> FogRecord:
    """Validate a stored blob. Raises MalformedPayloadError."""
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedPayloadError(f"fog_{record_id}: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedPayloadError(f"fog_{record_id}: not a JSON object")
    # Falsy status reads as hidden.
    if not data.get("status"):
        data.pop("status", None)
    data.pop("id", None)
    try:
        record = FogRecord.model_validate({**data, "id": record_id})
    except ValidationError as exc:
        raise MalformedPayloadError(f"fog_{record_id}: {exc.error_count()} schema errors") from exc
    if record.status is RecordStatus.INVALID:
        raise MalformedPayloadError(f"fog_{record_id}: stored status 'invalid'")
    return record


class FogRecordStore:
    """Records layered on a blob storage plus a key index."""

    def __init__(
        self,
        storage: BlobStorage,
        index: KeyIndex | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.index = index or KeyIndex(storage)
        self.clock = clock

    def create(self, game_id: str, owner: str, encoded_position: str) -> str:
        """Persist a hidden record, then index it. Returns the new id.

        The record write and the index write are separate. If the
        index write fails the record is orphaned, never half-written.
        """
        if not self.storage.is_available():
            raise StorageUnavailableError("Storage unavailable, cannot create record")
        now = self.clock()
        record = FogRecord(
            id=new_record_id(now),
            encoded_position=encoded_position,
            timestamp=int(now),
            owner=owner,
            game_id=game_id,
            status=RecordStatus.HIDDEN,
        )
        self.storage.set_data(record_key(record.id), record.to_blob())
        self.index.append(record.id)
        logger.info("Created record %s for game %s", record.id, game_id)
        return record.id

    def get(self, record_id: str) -> FogRecord | None:
        if not self.storage.is_available():
            logger.error("Storage unavailable, read of %s skipped", record_id)
            return None
        raw = self.storage.get_data(record_key(record_id))
        if not raw:
            logger.warning("Indexed record %s has no blob", record_id)
            return None
        try:
            return parse_record(record_id, raw)
        except MalformedPayloadError as exc:
            logger.warning("Error parsing fog data: %s", exc)
            return None

    def list(self) -> list[FogRecord]:
        """All parseable records, newest first. Ties keep index order."""
        if not self.storage.is_available():
            logger.error("Storage unavailable, returning no records")
            return []
        records = []
        for record_id in self.index.list():
            record = self.get(record_id)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records

    def update(
        self, record_id: str, mutator: Callable[[FogRecord], FogRecord]
    ) -> FogRecord | None:
        """Apply ``mutator`` to the current record and overwrite the blob.

        The mutator receives and returns a whole record; there is no
        partial-field patching. Returns None when the record is absent.
        """
        current = self.get(record_id)
        if current is None:
            return None
        updated = mutator(current)
        if updated.id != record_id:
            raise ValueError(f"Mutator changed record id {record_id} -> {updated.id}")
        self.storage.set_data(record_key(record_id), updated.to_blob())
        return updated

    def classify(self, record_id: str) -> RecordStatus:
        """Stored status, or INVALID when absent or unparseable."""
        record = self.get(record_id)
        if record is None:
            return RecordStatus.INVALID
        return record.status

    def stats(self) -> RecordStats:
        records = self.list()
        return RecordStats(
            total=len(records),
            hidden=sum(1 for r in records if r.status is RecordStatus.HIDDEN),
            revealed=sum(1 for r in records if r.status is RecordStatus.REVEALED),
        )
