"""Likes and comments.

Both mutate only the remote copy of a post; the change becomes visible when
the next snapshot arrives. Pending posts exist only locally, so they cannot
be liked or commented on until their upload succeeds.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from netnook.db.time import now_millis
from netnook.schemas.content import Comment, ContentItem
from netnook.services.connection import RemoteConnection
from netnook.services.feed_state import FeedState
from netnook.services.identity import IdentitySession
from netnook.services.results import ActionResult, FailureReason

logger = logging.getLogger(__name__)


def _blocked(item: ContentItem | None, action: str) -> ActionResult | None:
    if item is None:
        return ActionResult.failure(FailureReason.NOT_FOUND, "Post not found.")
    if not item.is_synced:
        return ActionResult.failure(FailureReason.CONFLICT, f"Upload the post before {action}.")
    return None


class InteractionService:
    """Targeted remote updates to a single post."""

    def __init__(
        self,
        connection: RemoteConnection,
        state: FeedState,
        identity: IdentitySession,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.connection = connection
        self.state = state
        self.identity = identity
        self.clock = clock

    async def toggle_like(self, cid: str) -> ActionResult:
        """Flip the acting identity's like on ``cid``."""
        channel = self.connection.active_channel()
        if channel is None:
            return ActionResult.failure(FailureReason.OFFLINE, "Go online to like posts.")
        item = self.state.find(cid)
        blocked = _blocked(item, "liking it")
        if blocked is not None:
            return blocked

        actor = self.identity.actor_id
        liked = item.is_liked_by(actor)
        if not await channel.like_toggle(cid, actor, liked):
            return ActionResult.failure(FailureReason.REJECTED, "Could not update like.")
        logger.debug("%s %s post %s", actor, "unliked" if liked else "liked", cid)
        return ActionResult.success(item, "Like removed." if liked else "Liked.")

    async def add_comment(self, cid: str, text: str) -> ActionResult:
        """Submit a comment; the store assigns its key."""
        if not text.strip():
            return ActionResult.failure(FailureReason.INVALID, "Comment text is required.")
        channel = self.connection.active_channel()
        if channel is None:
            return ActionResult.failure(FailureReason.OFFLINE, "Go online to comment.")
        item = self.state.find(cid)
        blocked = _blocked(item, "commenting on it")
        if blocked is not None:
            return blocked

        comment = Comment(
            id="",
            text=text,
            user_id=self.identity.actor_id,
            user_name=self.identity.commenter_name,
            timestamp=self.clock(),
        )
        key = await channel.add_comment(cid, comment)
        if key is None:
            return ActionResult.failure(FailureReason.REJECTED, "Could not add comment.")
        return ActionResult.success(self.state.find(cid) or item, ref=key)
