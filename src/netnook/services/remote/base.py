"""Abstract remote sync channel.

A channel is the only way the feed core talks to the shared store. Every
public operation reports failure through its return value; transport faults
are logged and never propagated to callers.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from netnook.schemas.connection import RemoteConfig
from netnook.schemas.content import Comment, ContentItem, PostPatch
from netnook.services.subscription import Subscription

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[ContentItem]], None]


class RemoteError(RuntimeError):
    """Base exception raised for remote channel failures."""


class RemoteUnavailableError(RemoteError):
    """Raised when an operation is attempted without a live connection."""


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a remote write."""

    success: bool
    error: str | None = None


def outbound_record(item: ContentItem) -> dict[str, Any]:
    """Return the record written to the remote store for ``item``.

    The written record is always marked synced, and optional text fields are
    sent as empty strings because absent values do not survive the store.
    """
    record = item.model_dump(mode="json", by_alias=True, exclude_none=True)
    record["isSynced"] = True
    record["authorPhoto"] = item.author_photo or ""
    record["authorProfession"] = item.author_profession or ""
    return record


def sort_snapshot(items: list[ContentItem]) -> list[ContentItem]:
    """Order a snapshot newest first."""
    return sorted(items, key=lambda item: item.timestamp, reverse=True)


class RemoteChannel(ABC):
    """Push/subscribe/update/delete interface to a shared post store."""

    def __init__(self) -> None:
        self.config: RemoteConfig | None = None
        self._subscriptions: set[Subscription] = set()

    @property
    def connected(self) -> bool:
        return self.config is not None

    async def connect(self, config: RemoteConfig) -> bool:
        """Open the channel; reconnecting with a new config tears down the old one."""
        if self.connected and config == self.config:
            return True
        await self.disconnect()
        try:
            await self._open(config)
        except RemoteError as exc:
            logger.error("Remote connect failed: %s", exc)
            await self._close()
            return False
        self.config = config
        return True

    async def disconnect(self) -> None:
        """Release every live subscription, then the underlying transport."""
        for subscription in list(self._subscriptions):
            subscription.close()
        self._subscriptions.clear()
        if self.config is not None:
            await self._close()
            self.config = None

    def _track(self, subscription: Subscription) -> Subscription:
        self._subscriptions.add(subscription)
        return subscription

    def _untrack(self, subscription: Subscription) -> None:
        self._subscriptions.discard(subscription)

    @abstractmethod
    async def _open(self, config: RemoteConfig) -> None:
        """Establish the transport; raise ``RemoteError`` if misconfigured."""

    @abstractmethod
    async def _close(self) -> None:
        """Tear down the transport."""

    @abstractmethod
    async def write(self, item: ContentItem) -> WriteResult:
        """Upsert ``item`` by cid."""

    @abstractmethod
    async def update(self, cid: str, patch: PostPatch) -> bool:
        """Apply a partial update to one post."""

    @abstractmethod
    async def delete(self, cid: str) -> bool:
        """Remove one post."""

    @abstractmethod
    async def fetch(self, cid: str) -> ContentItem | None:
        """Return one post, or ``None`` when absent or unreachable."""

    @abstractmethod
    def subscribe(self, on_snapshot: SnapshotCallback) -> Subscription:
        """Deliver the most recent posts now and after every change."""

    @abstractmethod
    async def like_toggle(self, cid: str, user_id: str, currently_liked: bool) -> bool:
        """Set or clear one like flag."""

    @abstractmethod
    async def add_comment(self, cid: str, comment: Comment) -> str | None:
        """Append a comment; return the key assigned by the store."""
