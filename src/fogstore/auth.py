"""API key and caller identity for the fogstore gateway.

Empty key = development mode (no auth required).
Non-empty key = must match X-API-Key header.

The caller's identity arrives in X-Identity. Wallet connection happens
on the client; the gateway only compares identities.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, Security
from fastapi.security import APIKeyHeader

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def make_api_key_checker(expected_key: str):
    """Return a FastAPI dependency that checks the API key.

    If expected_key is empty, all requests are allowed (development mode).
    """

    async def check_api_key(
        api_key: str | None = Security(_api_key_header),
    ) -> str | None:
        if not expected_key:
            return None
        if api_key != expected_key:
            raise HTTPException(
                status_code=401,
                detail="Invalid or missing API key",
            )
        return api_key

    return check_api_key


async def require_identity(
    x_identity: str | None = Header(default=None),
) -> str:
    """Caller identity, or 401 when no wallet is connected."""
    if not x_identity or not x_identity.strip():
        raise HTTPException(status_code=401, detail="Please connect wallet first")
    return x_identity.strip()


async def optional_identity(
    x_identity: str | None = Header(default=None),
) -> str | None:
    """Caller identity when a wallet is connected, else None."""
    if not x_identity or not x_identity.strip():
        return None
    return x_identity.strip()
