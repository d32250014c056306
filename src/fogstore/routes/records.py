"""Record endpoints — store, list, read and reveal fogged positions.

Responses are snapshots. Nothing here holds record state between
requests.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator

from fogstore.auth import optional_identity, require_identity
from fogstore.codec import PositionCodec
from fogstore.deps import get_codec, get_lifecycle, get_store
from fogstore.errors import NotFoundError
from fogstore.lifecycle import RecordLifecycle
from fogstore.models import FogRecord
from fogstore.records import FogRecordStore

router = APIRouter(prefix="/api/v1", tags=["records"])


class NewPosition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: str = Field(alias="gameId")
    x: int
    y: int

    @field_validator("game_id")
    @classmethod
    def game_id_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("gameId is required")
        return v


def _view(record: FogRecord, lifecycle: RecordLifecycle, identity: str | None) -> dict:
    return {**record.public_view(), "canReveal": lifecycle.can_reveal(record, identity)}


@router.get("/records")
def list_records(
    identity: str | None = Depends(optional_identity),
    store: FogRecordStore = Depends(get_store),
    lifecycle: RecordLifecycle = Depends(get_lifecycle),
):
    return [_view(r, lifecycle, identity) for r in store.list()]


@router.get("/records/{record_id}")
def get_record(
    record_id: str,
    identity: str | None = Depends(optional_identity),
    store: FogRecordStore = Depends(get_store),
    lifecycle: RecordLifecycle = Depends(get_lifecycle),
):
    record = store.get(record_id)
    if record is None:
        raise NotFoundError(f"Record {record_id} not found")
    return _view(record, lifecycle, identity)


@router.get("/records/{record_id}/status")
def record_status(record_id: str, store: FogRecordStore = Depends(get_store)):
    return {"id": record_id, "status": store.classify(record_id).value}


@router.post("/records", status_code=201)
def create_record(
    body: NewPosition,
    owner: str = Depends(require_identity),
    store: FogRecordStore = Depends(get_store),
    codec: PositionCodec = Depends(get_codec),
):
    record_id = store.create(body.game_id, owner, codec.encode(body.x, body.y))
    return {"id": record_id}


@router.post("/records/{record_id}/reveal")
def reveal_record(
    record_id: str,
    requester: str = Depends(require_identity),
    lifecycle: RecordLifecycle = Depends(get_lifecycle),
):
    return _view(lifecycle.reveal(record_id, requester), lifecycle, requester)
