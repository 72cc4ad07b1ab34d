# src/netnook/utils/hash.py
"""Hashing helpers with a selectable 256-bit digest algorithm."""

from __future__ import annotations

import hashlib
from typing import Literal

from blake3 import blake3

HashAlgorithm = Literal["sha256", "blake3"]

SUPPORTED_ALGORITHMS: tuple[str, ...] = ("sha256", "blake3")


def digest(data: bytes, algorithm: HashAlgorithm | str = "sha256") -> bytes:
    """Return the 32-byte digest of ``data``.

    Args:
        data: Bytes to hash.
        algorithm: Either ``"sha256"`` or ``"blake3"``.

    Returns:
        Digest bytes (32 bytes for both algorithms).

    Raises:
        ValueError: If the algorithm is not supported.
    """
    if algorithm == "sha256":
        return hashlib.sha256(data).digest()
    if algorithm == "blake3":
        return blake3(data).digest()
    raise ValueError(f"Unsupported hash algorithm: {algorithm}")


def hexdigest(data: bytes, algorithm: HashAlgorithm | str = "sha256") -> str:
    """Return the hexadecimal digest of the supplied data."""
    return digest(data, algorithm).hex()
