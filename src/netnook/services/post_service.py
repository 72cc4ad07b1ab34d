"""Post lifecycle: create, retry, edit, delete and save-to-private.

A post is either Pending (only in the local cache, ``is_synced=False``) or
Synced (acknowledged by the remote store). Local state is persisted before
any network round-trip so a new post is visible immediately.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from netnook.core.settings import settings
from netnook.db.time import now_millis
from netnook.repositories.local_store import LocalCacheStore
from netnook.schemas.content import TEXT_POST_TYPE, AppState, Category, ContentItem, PostPatch
from netnook.services.cid import generate_cid
from netnook.services.connection import RemoteConnection
from netnook.services.feed_state import FeedState
from netnook.services.identity import IdentitySession
from netnook.services.results import ActionResult, FailureReason
from netnook.utils.codec import encode_file_payload, encode_text_payload, split_data_url, truncate_caption

logger = logging.getLogger(__name__)

OFFLINE_RETRY_MESSAGE = "Please connect to the network (Network Settings) to retry upload."
OFFLINE_EDIT_MESSAGE = "You must be online to edit global posts."
DELETE_FAILED_MESSAGE = "Could not delete post (Check permissions or connection)."


@dataclass(frozen=True)
class Attachment:
    """A media file attached to a new post, already encoded as a data URL."""

    data_url: str
    mime_type: str

    @classmethod
    def from_bytes(cls, content: bytes, mime_type: str) -> Attachment:
        return cls(data_url=encode_file_payload(content, mime_type), mime_type=mime_type)

    @classmethod
    def from_data_url(cls, data_url: str) -> Attachment:
        mime_type, _ = split_data_url(data_url)
        return cls(data_url=data_url, mime_type=mime_type or "application/octet-stream")


def build_edit_patch(item: ContentItem, text: str) -> PostPatch:
    """Text posts get a new body and title; media posts get a new caption."""
    if item.file_type == TEXT_POST_TYPE:
        return PostPatch(
            data=encode_text_payload(text),
            file_name=truncate_caption(text, settings.caption_max_length),
        )
    return PostPatch(file_name=text)


class PostLifecycleManager:
    """Drives posts between the local cache and the remote channel."""

    def __init__(
        self,
        store: LocalCacheStore,
        connection: RemoteConnection,
        state: FeedState,
        identity: IdentitySession,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.store = store
        self.connection = connection
        self.state = state
        self.identity = identity
        self.clock = clock
        self.post_category = Category.EDUCATION
        self._in_flight: set[str] = set()

    def _persist(self, local: AppState) -> None:
        self.state.local = local
        self.store.save(local)

    @contextmanager
    def _exclusive(self, cid: str) -> Iterator[bool]:
        """Yield False when another mutation of ``cid`` is still awaiting the remote."""
        if cid in self._in_flight:
            yield False
            return
        self._in_flight.add(cid)
        try:
            yield True
        finally:
            self._in_flight.discard(cid)

    def _mark_synced(self, cid: str) -> ContentItem | None:
        """Flip ``is_synced`` on every cached copy of ``cid`` without moving it."""
        local = self.state.local
        synced: ContentItem | None = None
        for category in self.state.categories_holding(cid):
            items = []
            for item in local.items_in(category):
                if item.cid == cid:
                    item = item.model_copy(update={"is_synced": True})
                    synced = synced or item
                items.append(item)
            local = local.with_items(category, items)
        if synced is not None:
            self._persist(local)
        return synced

    def build_item(
        self,
        text: str,
        attachment: Attachment | None,
        category: Category,
    ) -> ContentItem:
        """Construct a Pending item stamped with the acting identity."""
        timestamp = self.clock()
        if attachment is not None:
            payload = attachment.data_url
            file_name = text.strip()
            file_type = attachment.mime_type
        else:
            payload = encode_text_payload(text)
            file_name = truncate_caption(text, settings.caption_max_length)
            file_type = TEXT_POST_TYPE

        profile = self.identity.current
        return ContentItem(
            cid=generate_cid(payload, timestamp),
            file_name=file_name,
            file_type=file_type,
            data=payload,
            timestamp=timestamp,
            category=category,
            author=self.identity.author_name,
            author_id=self.identity.actor_id,
            author_photo=profile.photo_url if profile else None,
            author_profession=profile.profession if profile else "",
            is_synced=False,
        )

    async def create(
        self,
        text: str = "",
        attachment: Attachment | None = None,
        category: Category | None = None,
    ) -> ActionResult | None:
        """Create a post locally, then try to publish it.

        Returns ``None`` (and does nothing) when there is neither text nor an
        attachment. Otherwise the post always exists locally afterwards; the
        result carries a warning when the upload was rejected.
        """
        if not text.strip() and attachment is None:
            return None

        target = category or self.post_category
        item = self.build_item(text, attachment, target)
        self._persist(self.state.local.with_items(target, [item, *self.state.local.items_in(target)]))
        logger.info("Stored pending post %s in %s", item.cid, target.value)

        channel = self.connection.active_channel()
        if channel is None:
            return ActionResult.success(item)

        with self._exclusive(item.cid):
            result = await channel.write(item)
            if not result.success:
                logger.warning("Upload of %s failed: %s", item.cid, result.error)
                return ActionResult.success(
                    item,
                    f"Post saved locally only. Upload failed: {result.error}",
                )
            return ActionResult.success(self._mark_synced(item.cid) or item)

    async def retry(self, cid: str) -> ActionResult:
        """Upload a Pending post again."""
        item = self.state.find_local(cid)
        if item is None:
            return ActionResult.failure(FailureReason.NOT_FOUND, "Post is not in the local cache.")
        if item.is_synced:
            return ActionResult.success(item, "Post is already synced.")

        channel = self.connection.active_channel()
        if channel is None:
            return ActionResult.failure(FailureReason.OFFLINE, OFFLINE_RETRY_MESSAGE)

        with self._exclusive(cid) as acquired:
            if not acquired:
                return ActionResult.failure(FailureReason.CONFLICT, "Upload already in progress.")
            result = await channel.write(item)
            if not result.success:
                logger.warning("Retry of %s failed: %s", cid, result.error)
                return ActionResult.failure(FailureReason.REJECTED, f"Retry Failed: {result.error}")
            synced = self._mark_synced(cid)
        logger.info("Retried upload of %s succeeded", cid)
        return ActionResult.success(synced or item, "Upload Successful! Your post is now global.")

    async def edit(self, cid: str, text: str) -> ActionResult:
        """Push an edit of a Synced post, mirroring it locally on success.

        Pending posts cannot be edited; they must be uploaded first.
        """
        item = self.state.find(cid)
        if item is None:
            return ActionResult.failure(FailureReason.NOT_FOUND, "Post not found.")
        if not self.identity.is_author(item):
            return ActionResult.failure(FailureReason.FORBIDDEN, "Only the author can edit this post.")
        if not item.is_synced:
            return ActionResult.failure(
                FailureReason.CONFLICT,
                "This post has not been uploaded yet. Retry the upload before editing.",
            )
        if item.is_text_post and not text.strip():
            return ActionResult.failure(FailureReason.INVALID, "Post text cannot be empty.")

        channel = self.connection.active_channel()
        if channel is None:
            return ActionResult.failure(FailureReason.OFFLINE, OFFLINE_EDIT_MESSAGE)

        patch = build_edit_patch(item, text)
        changes = patch.model_dump(exclude_none=True)
        with self._exclusive(cid) as acquired:
            if not acquired:
                return ActionResult.failure(FailureReason.CONFLICT, "Another change to this post is in progress.")
            if not await channel.update(cid, patch):
                return ActionResult.failure(FailureReason.REJECTED, "Update failed. Check connection.")

        local = self.state.local
        for category in self.state.categories_holding(cid):
            local = local.with_items(
                category,
                [
                    cached.model_copy(update=changes) if cached.cid == cid else cached
                    for cached in local.items_in(category)
                ],
            )
        if local is not self.state.local:
            self._persist(local)
        logger.info("Edited post %s", cid)
        return ActionResult.success(item.model_copy(update=changes))

    async def delete(self, cid: str) -> ActionResult:
        """Delete remotely, then purge every local copy and the snapshot entry."""
        item = self.state.find(cid)
        if item is None:
            return ActionResult.failure(FailureReason.NOT_FOUND, "Post not found.")
        if not self.identity.is_author(item):
            return ActionResult.failure(FailureReason.FORBIDDEN, "Only the author can delete this post.")

        channel = self.connection.active_channel()
        if channel is None:
            return ActionResult.failure(FailureReason.OFFLINE, DELETE_FAILED_MESSAGE)

        with self._exclusive(cid) as acquired:
            if not acquired:
                return ActionResult.failure(FailureReason.CONFLICT, "Another change to this post is in progress.")
            if not await channel.delete(cid):
                return ActionResult.failure(FailureReason.REJECTED, DELETE_FAILED_MESSAGE)

        local = self.state.local
        for category in self.state.categories_holding(cid):
            local = local.with_items(
                category,
                [cached for cached in local.items_in(category) if cached.cid != cid],
            )
        if local is not self.state.local:
            self._persist(local)
        self.state.remote = [remote for remote in self.state.remote if remote.cid != cid]
        logger.info("Deleted post %s", cid)
        return ActionResult.success(item)

    def save_to_private(self, cid: str, category: Category | None = None) -> ActionResult:
        """Copy a visible post into a local category list."""
        item = self.state.find(cid)
        if item is None:
            return ActionResult.failure(FailureReason.NOT_FOUND, "Post not found.")
        target = category or item.category
        items = self.state.local.items_in(target)
        if any(cached.cid == cid for cached in items):
            return ActionResult.failure(FailureReason.CONFLICT, "Item already in your Private Cache.")
        self._persist(self.state.local.with_items(target, [item, *items]))
        return ActionResult.success(item, f"Saved to Private {target.value} folder!")
