"""Payload encoding for feed items.

Text posts carry their body as a ``data:text/plain;base64,...`` URL holding
UTF-8 bytes; media posts carry a data URL of the attached file.
"""

from __future__ import annotations

import base64
import binascii
import logging

from netnook.schemas.content import TEXT_POST_TYPE, ContentItem

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


def encode_text_payload(text: str) -> str:
    """Return the data URL stored for a text post."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"data:{TEXT_POST_TYPE};base64,{encoded}"


def encode_file_payload(content: bytes, mime_type: str) -> str:
    """Return the data URL stored for a media attachment."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def split_data_url(data_url: str) -> tuple[str, str]:
    """Split a data URL into its MIME type and base64 body.

    Strings without a header are treated as a bare base64 body.
    """
    header, sep, body = data_url.partition(",")
    if not sep:
        return "", data_url
    mime_type = header.removeprefix("data:").split(";", 1)[0]
    return mime_type, body


def decode_text_payload(data_url: str) -> str:
    """Decode a text post body, tolerating malformed payloads.

    Invalid base64 falls back to the raw body string; bytes that are not
    UTF-8 are rendered one character per byte.
    """
    _, body = split_data_url(data_url)
    try:
        raw = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Stored text payload is not valid base64; showing raw text")
        return body
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Stored text payload is not UTF-8; falling back to latin-1")
        return raw.decode("latin-1")


def truncate_caption(text: str, limit: int) -> str:
    """Return the title of a text post."""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def display_text(item: ContentItem) -> str:
    """Return the text a reader sees for an item: body for text posts, caption otherwise."""
    if item.is_text_post:
        return decode_text_payload(item.data)
    return item.file_name
