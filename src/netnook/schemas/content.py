"""Feed content schemas shared by the local cache and the remote channel."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TEXT_POST_TYPE = "text/plain"


class Category(str, Enum):
    """Partition key for local storage and tab filtering."""

    EDUCATION = "education"
    NEWS = "news"
    ENTERTAINMENT = "entertainment"


class WireModel(BaseModel):
    """Base model serialized with camelCase keys on the wire and on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Comment(WireModel):
    """A comment attached to a synced post."""

    id: str = ""
    text: str
    user_id: str
    user_name: str
    timestamp: int


class ContentItem(WireModel):
    """The unit of the feed.

    ``cid``, ``file_type``, ``timestamp``, ``category`` and the author fields
    never change after creation. ``likes`` and ``comments`` are only
    meaningful on the remote copy.
    """

    cid: str
    file_name: str = ""
    file_type: str
    data: str
    timestamp: int
    category: Category
    author: str = "Anonymous"
    author_id: str
    author_photo: str | None = None
    author_profession: str | None = None
    is_synced: bool = False
    likes: dict[str, bool] | None = None
    comments: dict[str, Comment] | None = None

    @property
    def is_text_post(self) -> bool:
        return self.file_type == TEXT_POST_TYPE

    @property
    def like_count(self) -> int:
        return len(self.likes) if self.likes else 0

    def is_liked_by(self, user_id: str) -> bool:
        return bool(self.likes and self.likes.get(user_id))

    def sorted_comments(self) -> list[Comment]:
        """Return comments ordered by creation time."""
        if not self.comments:
            return []
        return sorted(self.comments.values(), key=lambda comment: comment.timestamp)


class PostPatch(WireModel):
    """Partial update pushed to the remote channel on edit."""

    file_name: str | None = None
    data: str | None = None


class AppState(BaseModel):
    """The full local cache, one newest-first list per category."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    education: list[ContentItem] = Field(default_factory=list)
    news: list[ContentItem] = Field(default_factory=list)
    entertainment: list[ContentItem] = Field(default_factory=list)

    def items_in(self, category: Category) -> list[ContentItem]:
        return list(getattr(self, category.value))

    def with_items(self, category: Category, items: list[ContentItem]) -> AppState:
        """Return a copy of the state with one category list replaced."""
        return self.model_copy(update={category.value: list(items)})

    def iter_items(self) -> Iterator[ContentItem]:
        """Yield every cached item, category by category."""
        for category in Category:
            yield from getattr(self, category.value)

    def flatten(self) -> list[ContentItem]:
        return list(self.iter_items())

    def contains(self, cid: str) -> bool:
        return any(item.cid == cid for item in self.iter_items())
