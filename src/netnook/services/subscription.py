"""Releasable handles for long-lived subscriptions."""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by every ``subscribe`` call.

    ``close`` is idempotent; the release callback runs at most once.
    """

    def __init__(self, on_close: Callable[[], None] | None = None, *, name: str = "") -> None:
        self._on_close = on_close
        self._closed = on_close is None
        self.name = name

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the subscription."""
        if self._closed:
            return
        self._closed = True
        callback, self._on_close = self._on_close, None
        if callback is not None:
            callback()
            logger.debug("Released subscription %s", self.name or id(self))

    @classmethod
    def inert(cls, name: str = "") -> Subscription:
        """Return an already-closed subscription for unavailable sources."""
        return cls(None, name=name)
