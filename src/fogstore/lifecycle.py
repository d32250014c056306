"""Record lifecycle: hidden -> revealed, owner only.

``invalid`` is terminal and never stored; it is what a missing or
unparseable blob classifies as, and such records cannot be revealed.
"""

from __future__ import annotations

import logging

from fogstore.errors import NotFoundError, UnauthorizedError
from fogstore.models import FogRecord, RecordStatus
from fogstore.records import FogRecordStore

logger = logging.getLogger("fogstore.lifecycle")


def same_identity(a: str | None, b: str | None) -> bool:
    """Case-insensitive identity comparison. Empty never matches."""
    if not a or not b:
        return False
    return a.lower() == b.lower()


class RecordLifecycle:
    def __init__(self, store: FogRecordStore) -> None:
        self.store = store

    def can_reveal(self, record: FogRecord, requester: str | None) -> bool:
        return record.status is RecordStatus.HIDDEN and same_identity(requester, record.owner)

    def reveal(self, record_id: str, requester: str | None) -> FogRecord:
        """Transition a record to revealed.

        Raises NotFoundError for a missing or invalid record and
        UnauthorizedError for a non-owner. Revealing an already
        revealed record is a no-op.
        """
        record = self.store.get(record_id)
        if record is None:
            raise NotFoundError("Data not found")
        if not same_identity(requester, record.owner):
            logger.warning("Reveal of %s refused for %s", record_id, requester)
            raise UnauthorizedError(f"Only the owner may reveal record {record_id}")
        if record.status is RecordStatus.REVEALED:
            return record

        updated = self.store.update(
            record_id,
            lambda current: current.model_copy(update={"status": RecordStatus.REVEALED}),
        )
        if updated is None:
            raise NotFoundError("Data not found")
        logger.info("Record %s revealed", record_id)
        return updated
