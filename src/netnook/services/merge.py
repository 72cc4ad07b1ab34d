"""Reconciliation of the remote snapshot with the local cache."""

from __future__ import annotations

from collections.abc import Iterable

from netnook.schemas.content import AppState, Category, ContentItem
from netnook.utils.codec import display_text

GLOBAL_TAB = "global"


def merge_feed(remote: Iterable[ContentItem], local: AppState) -> list[ContentItem]:
    """Return one deduplicated, newest-first view of remote and local items.

    Remote items win for every shared cid and are always marked synced; local
    items only fill in cids the snapshot does not carry. Equal timestamps keep
    their insertion order (remote first, then local by category).
    """
    merged: dict[str, ContentItem] = {}
    for item in remote:
        merged[item.cid] = item if item.is_synced else item.model_copy(update={"is_synced": True})
    for item in local.iter_items():
        merged.setdefault(item.cid, item)
    return sorted(merged.values(), key=lambda item: item.timestamp, reverse=True)


def matches_term(item: ContentItem, term: str) -> bool:
    """Case-insensitive search over the caption and, for text posts, the body."""
    needle = term.lower()
    return needle in item.file_name.lower() or needle in display_text(item).lower()


def filter_feed(
    items: Iterable[ContentItem],
    tab: Category | str = GLOBAL_TAB,
    term: str | None = None,
) -> list[ContentItem]:
    """Derive the display view for a tab and optional search term."""
    category = None if tab == GLOBAL_TAB else Category(tab)
    view = [item for item in items if category is None or item.category is category]
    if term:
        view = [item for item in view if matches_term(item, term)]
    return view
