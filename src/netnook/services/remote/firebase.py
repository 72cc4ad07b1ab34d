"""Firebase Realtime Database channel.

Talks to the database through its REST API with ``httpx``. Change
notification uses the REST streaming endpoint (server-sent events); every
``put``/``patch`` event triggers a re-read of the bounded recent-posts query,
which is then delivered to the subscriber.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
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

# HTTP status codes
HTTP_BAD_REQUEST = 400

POSTS_PATH = "/posts"
CHANGE_EVENTS = frozenset({"put", "patch"})
TERMINAL_EVENTS = frozenset({"cancel", "auth_revoked"})


@dataclass
class _StreamState:
    """Mutable state of one feed stream."""

    callback: SnapshotCallback
    task: asyncio.Task[None] | None = None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(payload, Mapping) and payload.get("error"):
        return str(payload["error"])
    return f"HTTP {response.status_code}"


async def iter_sse_events(response: httpx.Response) -> AsyncIterator[tuple[str, str]]:
    """Yield ``(event, data)`` pairs from a server-sent events response."""
    event: str | None = None
    data_lines: list[str] = []
    async for line in response.aiter_lines():
        if not line:
            if event is not None:
                yield event, "\n".join(data_lines)
            event, data_lines = None, []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        value = value.removeprefix(" ")
        if field == "event":
            event = value
        elif field == "data":
            data_lines.append(value)
    if event is not None:
        yield event, "\n".join(data_lines)


class FirebaseRealtimeChannel(RemoteChannel):
    """Remote channel over the Firebase Realtime Database REST API."""

    def __init__(
        self,
        *,
        timeout_seconds: float | None = None,
        retry_seconds: float | None = None,
        window_size: int | None = None,
        order_by: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self.timeout_seconds = timeout_seconds or settings.remote_http_timeout_seconds
        self.retry_seconds = (
            settings.remote_stream_retry_seconds if retry_seconds is None else retry_seconds
        )
        self.window_size = window_size or settings.feed_window_size
        self.order_by = order_by or settings.feed_order_by
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._auth_token: str | None = None

    async def _open(self, config: RemoteConfig) -> None:
        if not config.database_url:
            raise RemoteError("Remote configuration has no databaseURL")
        self._auth_token = config.auth_token
        self._client = httpx.AsyncClient(
            base_url=config.database_url.rstrip("/"),
            timeout=httpx.Timeout(self.timeout_seconds),
            transport=self._transport,
        )
        if settings.remote_probe_on_connect:
            await self._request("GET", "/.json", params={"shallow": "true"})

    async def _close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _params(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        params: dict[str, str] = {}
        if self._auth_token:
            params["auth"] = self._auth_token
        if extra:
            params.update(extra)
        return params

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        if self._client is None:
            raise RemoteUnavailableError("Database not initialized (Offline)")
        try:
            response = await self._client.request(
                method,
                path,
                json=json_data,
                params=self._params(params),
            )
        except httpx.HTTPError as exc:
            raise RemoteError(f"Remote request failed: {exc}") from exc
        if response.status_code >= HTTP_BAD_REQUEST:
            raise RemoteError(_error_message(response))
        return response

    async def write(self, item: ContentItem) -> WriteResult:
        try:
            await self._request("PUT", f"{POSTS_PATH}/{item.cid}.json", json_data=outbound_record(item))
        except RemoteError as exc:
            logger.error("Upload error for %s: %s", item.cid, exc)
            return WriteResult(success=False, error=str(exc) or "Unknown Upload Error")
        return WriteResult(success=True)

    async def update(self, cid: str, patch: PostPatch) -> bool:
        try:
            await self._request(
                "PATCH",
                f"{POSTS_PATH}/{cid}.json",
                json_data=patch.model_dump(by_alias=True, exclude_none=True),
            )
        except RemoteError as exc:
            logger.error("Update error for %s: %s", cid, exc)
            return False
        return True

    async def delete(self, cid: str) -> bool:
        try:
            await self._request("DELETE", f"{POSTS_PATH}/{cid}.json")
        except RemoteError as exc:
            logger.error("Delete error for %s: %s", cid, exc)
            return False
        return True

    async def fetch(self, cid: str) -> ContentItem | None:
        try:
            response = await self._request("GET", f"{POSTS_PATH}/{cid}.json")
        except RemoteError as exc:
            logger.error("Fetch error for %s: %s", cid, exc)
            return None
        try:
            record = response.json()
        except ValueError:
            logger.error("Fetch returned malformed JSON for %s", cid)
            return None
        if not record:
            return None
        return _parse_record(cid, record)

    async def recent(self) -> list[ContentItem]:
        """Read the bounded most-recent window, newest first.

        The window is the last ``window_size`` children under ``order_by``.
        With the default ``$key`` ordering that is the lexicographically
        largest cids, which are digests and so not the newest posts; the
        in-memory backend keeps insertion order instead. Ordering by
        ``timestamp`` gives a true newest window but requires an
        ``.indexOn`` rule for ``timestamp`` on the posts node.

        Raises:
            RemoteError: If the query fails.
        """
        response = await self._request(
            "GET",
            f"{POSTS_PATH}.json",
            params={"orderBy": json.dumps(self.order_by), "limitToLast": str(self.window_size)},
        )
        records = response.json() or {}
        if not isinstance(records, Mapping):
            raise RemoteError("Unexpected feed payload")
        items = [_parse_record(cid, record) for cid, record in records.items()]
        return sort_snapshot([item for item in items if item is not None])

    def subscribe(self, on_snapshot: SnapshotCallback) -> Subscription:
        if self._client is None:
            return Subscription.inert("firebase-feed")
        state = _StreamState(callback=on_snapshot)

        def _release() -> None:
            task = state.task
            if task is not None and not task.done() and task is not _running_task():
                task.cancel()
            self._untrack(subscription)

        subscription = self._track(Subscription(_release, name="firebase-feed"))
        state.task = asyncio.get_running_loop().create_task(self._listen(subscription, state))
        return subscription

    async def _listen(self, subscription: Subscription, state: _StreamState) -> None:
        while not subscription.closed:
            try:
                await self._stream_once(subscription, state)
            except RemoteError as exc:
                logger.warning("Feed stream interrupted: %s", exc)
            except httpx.HTTPError as exc:
                logger.warning("Feed stream network error: %s", exc)
            except ValueError as exc:
                logger.warning("Feed stream returned malformed data: %s", exc)
            if subscription.closed:
                return
            await asyncio.sleep(self.retry_seconds)

    async def _stream_once(self, subscription: Subscription, state: _StreamState) -> None:
        if self._client is None:
            raise RemoteUnavailableError("Database not initialized (Offline)")
        async with self._client.stream(
            "GET",
            f"{POSTS_PATH}.json",
            params=self._params(),
            headers={"Accept": "text/event-stream"},
            timeout=httpx.Timeout(self.timeout_seconds, read=None),
        ) as response:
            if response.status_code >= HTTP_BAD_REQUEST:
                await response.aread()
                raise RemoteError(_error_message(response))
            async for event, _ in iter_sse_events(response):
                if subscription.closed:
                    return
                if event in CHANGE_EVENTS:
                    items = await self.recent()
                    if subscription.closed:
                        return
                    state.callback(items)
                elif event in TERMINAL_EVENTS:
                    logger.warning("Feed stream ended by server: %s", event)
                    subscription.close()
                    return

    async def like_toggle(self, cid: str, user_id: str, currently_liked: bool) -> bool:
        path = f"{POSTS_PATH}/{cid}/likes/{user_id}.json"
        try:
            if currently_liked:
                await self._request("DELETE", path)
            else:
                await self._request("PUT", path, json_data=True)
        except RemoteError as exc:
            logger.error("Like error for %s: %s", cid, exc)
            return False
        return True

    async def add_comment(self, cid: str, comment: Comment) -> str | None:
        try:
            response = await self._request(
                "POST",
                f"{POSTS_PATH}/{cid}/comments.json",
                json_data=comment.model_dump(mode="json", by_alias=True),
            )
        except RemoteError as exc:
            logger.error("Comment error for %s: %s", cid, exc)
            return None
        try:
            payload = response.json()
        except ValueError:
            return None
        return payload.get("name") if isinstance(payload, Mapping) else None


def _running_task() -> asyncio.Task[Any] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


def _parse_record(cid: str, record: Any) -> ContentItem | None:
    try:
        return ContentItem.model_validate(record)
    except ValidationError as exc:
        logger.warning("Skipping malformed remote post %s: %s", cid, exc.error_count())
        return None
