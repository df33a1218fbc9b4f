# src/score_gate/utils/hash.py
"""BLAKE3 hashing helpers."""

from __future__ import annotations

from blake3 import blake3

KEY_DERIVATION_CONTEXT = "score-gate 2024 session token key"


def blake3_hexdigest(data: bytes) -> str:
    """Return the hexadecimal digest of the supplied data."""
    return blake3(data).hexdigest()


def derive_key(secret: str | bytes) -> bytes:
    """Derive a 32-byte keyed-hash key from an arbitrary-length secret."""
    material = secret.encode() if isinstance(secret, str) else secret
    return blake3(material, derive_key_context=KEY_DERIVATION_CONTEXT).digest()


def keyed_hexdigest(key: bytes, data: bytes) -> str:
    """Return a BLAKE3 MAC of ``data`` under a 32-byte ``key``."""
    return blake3(data, key=key).hexdigest()
