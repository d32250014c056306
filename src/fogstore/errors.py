"""Error taxonomy for the fog store.

Only UnauthorizedError and SignatureRefusedError are meant to reach a
player. The others are recovered inside the store and show up as empty
results, except NotFoundError on an explicit reveal.
"""

from __future__ import annotations


class FogError(Exception):
    """Base class for every fog store error."""


class NotFoundError(FogError):
    """Record or index blob absent."""


class MalformedPayloadError(FogError):
    """A stored blob could not be parsed into its schema."""


class StorageUnavailableError(FogError):
    """The backing storage failed its liveness probe."""


class UnauthorizedError(FogError):
    """A non-owner attempted an owner-only transition."""


class SignatureRefusedError(FogError):
    """The signing step was declined, failed, or timed out."""
