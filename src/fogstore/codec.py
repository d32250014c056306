"""The position codec — coordinate obfuscation between players and storage.

V1: reversible placeholder. The token shape is in place; actual
encryption comes when a trusted party can hold the decode key.

The codec sits between clients and the record store. Tokens carry a
fixed marker so they can be told apart from arbitrary strings.

Anyone holding a token can decode it. The signature step in
``fogstore.disclosure`` gates the UI, not the data.
"""

from __future__ import annotations

import base64
import binascii
import logging

from fogstore.models import Position

logger = logging.getLogger("fogstore.codec")

MARKER = "FHE-"


class PositionCodec:
    """Coordinate obfuscation layer. V1 = tagged base64."""

    def encode(self, x: int, y: int) -> str:
        """Map a plaintext coordinate to a storage token."""
        body = base64.b64encode(f"{int(x)},{int(y)}".encode("ascii"))
        return MARKER + body.decode("ascii")

    def decode(self, token: str) -> Position:
        """Map a storage token back to a coordinate.

        Malformed tokens decode to (0, 0). Callers must not read (0, 0)
        as proof of a real position.
        """
        if not isinstance(token, str) or not token.startswith(MARKER):
            return Position(x=0, y=0)
        try:
            plain = base64.b64decode(token[len(MARKER):], validate=True).decode("ascii")
            x_str, y_str = plain.split(",")
            return Position(x=int(x_str), y=int(y_str))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            logger.warning("Undecodable position token %.16s...", token)
            return Position(x=0, y=0)
