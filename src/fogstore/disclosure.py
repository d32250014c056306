"""Signature-gated disclosure of a fogged position.

The requester signs a challenge that binds the session's public key
material, the storage contract address, the chain id, the session start
and its validity window. Only after the signer returns a signature is
the token decoded.

The signature is not verified here. That belongs to a trusted server
or contract holding the real decode key; until one exists, disclosure
gates the client, not the data.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Protocol

from fogstore.codec import PositionCodec
from fogstore.errors import SignatureRefusedError
from fogstore.lifecycle import same_identity
from fogstore.models import Position

logger = logging.getLogger("fogstore.disclosure")


class Signer(Protocol):
    """What disclosure needs from a wallet."""

    def current_identity(self) -> str:
        ...

    async def sign(self, message: str) -> str:
        ...


def generate_public_key(n_hex: int = 2000) -> str:
    return "0x" + secrets.token_hex(n_hex // 2)


@dataclass(frozen=True)
class DisclosureSession:
    """Per-session challenge parameters. Built once, passed in."""

    public_key: str
    contract_address: str
    chain_id: int
    start_timestamp: int
    duration_days: int = 30

    @classmethod
    def start(
        cls,
        contract_address: str,
        chain_id: int,
        duration_days: int = 30,
        now: float | None = None,
    ) -> DisclosureSession:
        return cls(
            public_key=generate_public_key(),
            contract_address=contract_address,
            chain_id=chain_id,
            start_timestamp=int(time.time() if now is None else now),
            duration_days=duration_days,
        )

    def challenge(self) -> str:
        return (
            f"publickey:{self.public_key}\n"
            f"contractAddresses:{self.contract_address}\n"
            f"contractsChainId:{self.chain_id}\n"
            f"startTimestamp:{self.start_timestamp}\n"
            f"durationDays:{self.duration_days}"
        )

    def expires_at(self) -> int:
        return self.start_timestamp + self.duration_days * 86400


class DisclosureProtocol:
    """Sign the session challenge, then decode. Every call signs again."""

    def __init__(
        self,
        session: DisclosureSession,
        codec: PositionCodec | None = None,
        sign_timeout: float | None = 120.0,
    ) -> None:
        self.session = session
        self.codec = codec or PositionCodec()
        self.sign_timeout = sign_timeout

    async def disclose(
        self, requester: str | None, encoded_position: str, signer: Signer
    ) -> Position:
        """Return the plaintext position, or raise SignatureRefusedError."""
        if not requester:
            raise SignatureRefusedError("Please connect wallet first")
        if not same_identity(signer.current_identity(), requester):
            raise SignatureRefusedError("Signer is not bound to the requesting identity")

        message = self.session.challenge()
        try:
            signature = await asyncio.wait_for(signer.sign(message), timeout=self.sign_timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Signature from %s timed out after %ss", requester, self.sign_timeout)
            raise SignatureRefusedError("Signature request timed out") from exc
        except SignatureRefusedError:
            raise
        except Exception as exc:
            logger.error("Decryption failed for %s: %s", requester, exc)
            raise SignatureRefusedError(f"Signing failed: {exc}") from exc
        if not signature:
            raise SignatureRefusedError("Empty signature")

        logger.info("Position disclosed to %s", requester)
        return self.codec.decode(encoded_position)
