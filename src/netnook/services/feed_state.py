"""In-memory feed state shared by the lifecycle, interaction and runtime layers."""

from __future__ import annotations

from dataclasses import dataclass, field

from netnook.schemas.content import AppState, Category, ContentItem
from netnook.services.merge import merge_feed


@dataclass
class FeedState:
    """Latest local cache plus the latest remote snapshot.

    Both halves are replaced wholesale; nothing mutates them in place.
    """

    local: AppState = field(default_factory=AppState)
    remote: list[ContentItem] = field(default_factory=list)

    def merged(self) -> list[ContentItem]:
        return merge_feed(self.remote, self.local)

    def find(self, cid: str) -> ContentItem | None:
        """Return the item as the merged view shows it."""
        for item in self.remote:
            if item.cid == cid:
                return item if item.is_synced else item.model_copy(update={"is_synced": True})
        return self.find_local(cid)

    def find_local(self, cid: str) -> ContentItem | None:
        for item in self.local.iter_items():
            if item.cid == cid:
                return item
        return None

    def categories_holding(self, cid: str) -> list[Category]:
        return [
            category
            for category in Category
            if any(item.cid == cid for item in self.local.items_in(category))
        ]
