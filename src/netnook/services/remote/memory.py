"""In-process remote channel.

Backends are addressed by ``memory://<name>`` database URLs and live for the
lifetime of the process, so several channels (several simulated devices) can
share one store.
"""

from __future__ import annotations

import copy
import itertools
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from netnook.core.settings import settings
from netnook.schemas.connection import RemoteConfig
from netnook.schemas.content import Comment, ContentItem, PostPatch
from netnook.services.remote.base import (
    RemoteChannel,
    RemoteError,
    RemoteUnavailableError,
    SnapshotCallback,
    WriteResult,
    outbound_record,
    sort_snapshot,
)
from netnook.services.subscription import Subscription

logger = logging.getLogger(__name__)

MEMORY_SCHEME = "memory://"


class MemoryBackend:
    """A shared post store held in memory.

    Records are stored as wire dictionaries keyed by cid, in insertion order.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self.posts: dict[str, dict[str, Any]] = {}
        self.read_only = False
        self._listeners: list[Callable[[], None]] = []
        self._keys = itertools.count(1)

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener and return its remover."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def check_writable(self) -> None:
        if self.read_only:
            raise RemoteError("PERMISSION_DENIED: store is read-only")

    def next_key(self) -> str:
        return f"-c{next(self._keys):08d}"

    def recent(self, window: int) -> list[dict[str, Any]]:
        """Return the last ``window`` records by insertion order."""
        return list(self.posts.values())[-window:]

    def reset(self) -> None:
        self.posts.clear()
        self.read_only = False
        self._listeners.clear()
        self._keys = itertools.count(1)


_BACKENDS: dict[str, MemoryBackend] = {}


def get_memory_backend(name: str = "default") -> MemoryBackend:
    """Return the process-wide backend registered under ``name``."""
    if name not in _BACKENDS:
        _BACKENDS[name] = MemoryBackend(name)
    return _BACKENDS[name]


class MemoryChannel(RemoteChannel):
    """Remote channel over a :class:`MemoryBackend`."""

    def __init__(self, backend: MemoryBackend | None = None, *, window_size: int | None = None) -> None:
        super().__init__()
        self._fixed_backend = backend
        self.backend: MemoryBackend | None = None
        self.window_size = window_size or settings.feed_window_size

    async def _open(self, config: RemoteConfig) -> None:
        if self._fixed_backend is not None:
            self.backend = self._fixed_backend
            return
        url = config.database_url or ""
        if not url.startswith(MEMORY_SCHEME):
            raise RemoteError(f"Not a memory database URL: {url!r}")
        self.backend = get_memory_backend(url.removeprefix(MEMORY_SCHEME) or "default")

    async def _close(self) -> None:
        self.backend = None

    def _require_backend(self) -> MemoryBackend:
        if self.backend is None:
            raise RemoteUnavailableError("Database not initialized (Offline)")
        return self.backend

    async def write(self, item: ContentItem) -> WriteResult:
        try:
            backend = self._require_backend()
            backend.check_writable()
            backend.posts[item.cid] = outbound_record(item)
        except RemoteError as exc:
            logger.error("Upload error for %s: %s", item.cid, exc)
            return WriteResult(success=False, error=str(exc))
        backend.notify()
        return WriteResult(success=True)

    async def update(self, cid: str, patch: PostPatch) -> bool:
        try:
            backend = self._require_backend()
            backend.check_writable()
            record = backend.posts.get(cid)
            if record is None:
                raise RemoteError(f"No such post: {cid}")
            record.update(patch.model_dump(by_alias=True, exclude_none=True))
        except RemoteError as exc:
            logger.error("Update error for %s: %s", cid, exc)
            return False
        backend.notify()
        return True

    async def delete(self, cid: str) -> bool:
        try:
            backend = self._require_backend()
            backend.check_writable()
        except RemoteError as exc:
            logger.error("Delete error for %s: %s", cid, exc)
            return False
        backend.posts.pop(cid, None)
        backend.notify()
        return True

    async def fetch(self, cid: str) -> ContentItem | None:
        try:
            backend = self._require_backend()
        except RemoteError as exc:
            logger.error("Fetch error for %s: %s", cid, exc)
            return None
        record = backend.posts.get(cid)
        if record is None:
            return None
        return _parse_record(cid, record)

    def subscribe(self, on_snapshot: SnapshotCallback) -> Subscription:
        if self.backend is None:
            return Subscription.inert("memory-feed")
        backend = self.backend

        def _deliver() -> None:
            records = backend.recent(self.window_size)
            items = [item for item in (_parse_record(r.get("cid", "?"), r) for r in records) if item]
            on_snapshot(sort_snapshot(items))

        remove_listener = backend.add_listener(_deliver)

        def _release() -> None:
            remove_listener()
            self._untrack(subscription)

        subscription = self._track(Subscription(_release, name=f"memory-feed:{backend.name}"))
        _deliver()
        return subscription

    async def like_toggle(self, cid: str, user_id: str, currently_liked: bool) -> bool:
        try:
            backend = self._require_backend()
            backend.check_writable()
            record = backend.posts.get(cid)
            if record is None:
                raise RemoteError(f"No such post: {cid}")
        except RemoteError as exc:
            logger.error("Like error for %s: %s", cid, exc)
            return False
        likes = record.setdefault("likes", {})
        if currently_liked:
            likes.pop(user_id, None)
        else:
            likes[user_id] = True
        # Empty nodes do not exist in the store.
        if not likes:
            del record["likes"]
        backend.notify()
        return True

    async def add_comment(self, cid: str, comment: Comment) -> str | None:
        try:
            backend = self._require_backend()
            backend.check_writable()
            record = backend.posts.get(cid)
            if record is None:
                raise RemoteError(f"No such post: {cid}")
        except RemoteError as exc:
            logger.error("Comment error for %s: %s", cid, exc)
            return None
        key = backend.next_key()
        record.setdefault("comments", {})[key] = comment.model_dump(mode="json", by_alias=True)
        backend.notify()
        return key


def _parse_record(cid: str, record: dict[str, Any]) -> ContentItem | None:
    try:
        return ContentItem.model_validate(copy.deepcopy(record))
    except ValidationError as exc:
        logger.warning("Skipping malformed remote post %s: %s", cid, exc.error_count())
        return None
