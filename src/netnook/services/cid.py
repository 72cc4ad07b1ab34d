"""Content identifier generation."""

from __future__ import annotations

from netnook.core.settings import settings
from netnook.db.time import now_millis
from netnook.utils.hash import hexdigest


def generate_cid(
    payload: str,
    created_at: int | None = None,
    *,
    algorithm: str | None = None,
) -> str:
    """Derive a content identifier for a new post.

    The creation time is mixed into the digest input, so posting the same
    payload twice yields two distinct identifiers.

    Args:
        payload: Encoded post payload (data URL).
        created_at: Creation time in epoch milliseconds; defaults to now.
        algorithm: Digest algorithm override; defaults to ``settings.cid_algorithm``.

    Returns:
        Prefixed, fixed-length opaque identifier.

    Raises:
        ValueError: If the configured digest algorithm is unsupported.
    """
    millis = now_millis() if created_at is None else created_at
    material = f"{payload}{millis}".encode("utf-8")
    digest_hex = hexdigest(material, algorithm or settings.cid_algorithm)
    return settings.cid_prefix + digest_hex[: settings.cid_hex_length]
