"""Typed records for the blobs kept in generic storage.

Every blob read back from storage is validated against one of these
schemas. A blob that fails validation is never handed out as a
best-effort dict; the store classifies it as invalid instead.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RecordStatus(str, Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"
    # Read-time classification only. Never written to storage.
    INVALID = "invalid"


class Position(BaseModel):
    """A plaintext board coordinate."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int


class FogRecord(BaseModel):
    """One stored, status-tagged position entry.

    The id is not part of the stored blob; it lives in the storage key
    (``fog_<id>``) and is attached when the blob is read. Keys this
    schema does not know are kept and written back unchanged.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str = Field(exclude=True)
    encoded_position: str = Field(alias="position")
    timestamp: int
    owner: str
    game_id: str = Field(alias="gameId")
    status: RecordStatus = RecordStatus.HIDDEN

    def to_blob(self) -> bytes:
        """Serialize to the wire format: UTF-8 JSON without the id."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    def public_view(self) -> dict:
        """Snapshot handed to clients, id included."""
        return {"id": self.id, **self.model_dump(mode="json", by_alias=True)}


class RecordStats(BaseModel):
    """Counts shown on a dashboard."""

    total: int = 0
    hidden: int = 0
    revealed: int = 0
