"""Fogstore — fogged position storage and signature-gated disclosure."""

__version__ = "0.1.0"
