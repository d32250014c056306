"""Disclosure endpoints — the challenge to sign and the signed decode."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from fogstore.auth import require_identity
from fogstore.deps import get_disclosure, get_store
from fogstore.disclosure import DisclosureProtocol
from fogstore.errors import NotFoundError
from fogstore.records import FogRecordStore
from fogstore.wallet import PresentedSignature

router = APIRouter(prefix="/api/v1", tags=["disclosure"])


class SignedRequest(BaseModel):
    signature: str = ""


@router.get("/disclosure/challenge")
def challenge(protocol: DisclosureProtocol = Depends(get_disclosure)):
    session = protocol.session
    return {
        "message": session.challenge(),
        "startTimestamp": session.start_timestamp,
        "durationDays": session.duration_days,
        "expiresAt": session.expires_at(),
    }


@router.post("/records/{record_id}/disclose")
async def disclose_record(
    record_id: str,
    body: SignedRequest,
    requester: str = Depends(require_identity),
    store: FogRecordStore = Depends(get_store),
    protocol: DisclosureProtocol = Depends(get_disclosure),
):
    record = await run_in_threadpool(store.get, record_id)
    if record is None:
        raise NotFoundError(f"Record {record_id} not found")
    signer = PresentedSignature(requester, body.signature)
    position = await protocol.disclose(requester, record.encoded_position, signer)
    return {"id": record_id, **position.model_dump()}
