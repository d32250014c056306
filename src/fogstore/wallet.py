"""Signers for the disclosure handshake.

LocalWallet holds an Ed25519 key in process; it stands in for a
player's wallet in development and tests. PresentedSignature carries a
signature a remote client already produced over the session challenge.
"""

from __future__ import annotations

import hashlib
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from fogstore.errors import SignatureRefusedError


# --------- Ed25519 (sign/verify) ----------
def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = ed25519.Ed25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()


def identity_for(pub_raw: bytes) -> str:
    """Address-style identity: 0x + last 20 bytes of SHA-256(pubkey)."""
    return "0x" + hashlib.sha256(pub_raw).hexdigest()[-40:]


class LocalWallet:
    def __init__(self, priv_raw: bytes | None = None, approve: bool = True) -> None:
        if priv_raw is None:
            priv_raw, _ = ed25519_generate()
        self._sk = ed25519.Ed25519PrivateKey.from_private_bytes(priv_raw)
        self.pub_raw = self._sk.public_key().public_bytes_raw()
        self.approve = approve
        self.signed: list[str] = []

    def current_identity(self) -> str:
        return identity_for(self.pub_raw)

    async def sign(self, message: str) -> str:
        if not self.approve:
            raise SignatureRefusedError("User rejected the signature request")
        self.signed.append(message)
        return "0x" + self._sk.sign(message.encode("utf-8")).hex()

    def verify(self, message: str, signature: str) -> bool:
        try:
            sig = bytes.fromhex(signature.removeprefix("0x"))
            ed25519.Ed25519PublicKey.from_public_bytes(self.pub_raw).verify(
                sig, message.encode("utf-8")
            )
            return True
        except (ValueError, InvalidSignature):
            return False


class PresentedSignature:
    """A signature submitted alongside a request. Empty = refused."""

    def __init__(self, identity: str, signature: str | None) -> None:
        self.identity = identity
        self.signature = signature or ""

    def current_identity(self) -> str:
        return self.identity

    async def sign(self, message: str) -> str:
        if not self.signature:
            raise SignatureRefusedError("No signature presented")
        return self.signature
