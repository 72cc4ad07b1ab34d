"""Outcome values returned by feed actions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from netnook.schemas.content import ContentItem


class FailureReason(Enum):
    """Why an action did not take effect."""

    INVALID = "invalid"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    OFFLINE = "offline"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ActionResult:
    """Result of a lifecycle or interaction action.

    ``message`` is user-facing. A successful result may still carry a
    warning message (e.g. a post saved locally whose upload failed).
    """

    ok: bool
    item: ContentItem | None = None
    message: str | None = None
    reason: FailureReason | None = None
    ref: str | None = None

    @classmethod
    def success(
        cls,
        item: ContentItem | None = None,
        message: str | None = None,
        *,
        ref: str | None = None,
    ) -> ActionResult:
        return cls(ok=True, item=item, message=message, ref=ref)

    @classmethod
    def failure(cls, reason: FailureReason, message: str) -> ActionResult:
        return cls(ok=False, message=message, reason=reason)
