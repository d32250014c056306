"""Meta endpoints — health, version, record counts."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fogstore import __version__
from fogstore.deps import get_store
from fogstore.records import FogRecordStore

router = APIRouter(prefix="/api/v1", tags=["meta"])


@router.get("/health")
def health(store: FogRecordStore = Depends(get_store)):
    return {
        "status": "ok",
        "service": "fogstore",
        "storage": "ok" if store.storage.is_available() else "unavailable",
    }


@router.get("/version")
def version():
    return {"gateway": __version__}


@router.get("/stats")
def stats(store: FogRecordStore = Depends(get_store)):
    return store.stats().model_dump()
