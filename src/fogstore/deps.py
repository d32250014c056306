"""FastAPI dependencies for fogstore routes."""

from __future__ import annotations

from fastapi import Request

from fogstore.codec import PositionCodec
from fogstore.disclosure import DisclosureProtocol
from fogstore.lifecycle import RecordLifecycle
from fogstore.records import FogRecordStore


def get_store(request: Request) -> FogRecordStore:
    """Get the record store from app state."""
    return request.app.state.store


def get_lifecycle(request: Request) -> RecordLifecycle:
    return request.app.state.lifecycle


def get_codec(request: Request) -> PositionCodec:
    return request.app.state.codec


def get_disclosure(request: Request) -> DisclosureProtocol:
    return request.app.state.disclosure
