# tests/services/test_interactions.py
"""Tests for likes and comments."""

from __future__ import annotations

import pytest
from pytest_mock import MockerFixture

from netnook.schemas.profile import ProviderIdentity
from netnook.services.remote import MemoryBackend
from netnook.services.results import FailureReason
from netnook.services.runtime import FeedRuntime


@pytest.mark.asyncio
async def test_like_requires_connection(runtime: FeedRuntime) -> None:
    result = await runtime.interactions.toggle_like("QmAny")
    assert result.reason is FailureReason.OFFLINE
    assert result.message == "Go online to like posts."


@pytest.mark.asyncio
async def test_like_toggles_presence(runtime: FeedRuntime, memory_backend: MemoryBackend) -> None:
    await runtime.start()
    created = await runtime.posts.create("like me")
    cid = created.item.cid
    actor = runtime.identity.actor_id

    liked = await runtime.interactions.toggle_like(cid)
    assert liked.ok
    assert memory_backend.posts[cid]["likes"] == {actor: True}
    assert runtime.state.find(cid).like_count == 1
    assert runtime.state.find(cid).is_liked_by(actor)

    unliked = await runtime.interactions.toggle_like(cid)
    assert unliked.ok
    assert "likes" not in memory_backend.posts[cid]
    assert runtime.state.find(cid).like_count == 0


@pytest.mark.asyncio
async def test_likes_from_two_identities_accumulate(
    runtime: FeedRuntime,
    memory_backend: MemoryBackend,
) -> None:
    await runtime.start()
    created = await runtime.posts.create("popular")
    cid = created.item.cid

    await runtime.interactions.toggle_like(cid)
    await runtime.identity.sign_in(ProviderIdentity(uid="uid-alice", display_name="Alice"))
    await runtime.interactions.toggle_like(cid)

    assert set(memory_backend.posts[cid]["likes"]) == {runtime.store.device_id(), "uid-alice"}
    merged = next(item for item in runtime.feed() if item.cid == cid)
    assert merged.like_count == 2


@pytest.mark.asyncio
async def test_like_unknown_post(runtime: FeedRuntime) -> None:
    await runtime.start()
    result = await runtime.interactions.toggle_like("QmMissing")
    assert result.reason is FailureReason.NOT_FOUND


@pytest.mark.asyncio
async def test_anonymous_comment(runtime: FeedRuntime, clock) -> None:
    await runtime.start()
    created = await runtime.posts.create("discuss")
    clock.advance(5)

    result = await runtime.interactions.add_comment(created.item.cid, "first!")

    assert result.ok
    assert result.ref == "-c00000001"
    comments = runtime.state.find(created.item.cid).sorted_comments()
    assert len(comments) == 1
    assert comments[0].text == "first!"
    assert comments[0].user_name == "NetNooker"
    assert comments[0].user_id == runtime.store.device_id()
    assert comments[0].timestamp == 1005


@pytest.mark.asyncio
async def test_signed_in_comment_uses_display_name(runtime: FeedRuntime) -> None:
    await runtime.start()
    await runtime.identity.sign_in(ProviderIdentity(uid="uid-alice", display_name="Alice"))
    created = await runtime.posts.create("discuss")

    await runtime.interactions.add_comment(created.item.cid, "hi")
    await runtime.interactions.add_comment(created.item.cid, "again")

    comments = runtime.state.find(created.item.cid).sorted_comments()
    assert [comment.user_name for comment in comments] == ["Alice", "Alice"]
    assert {comment.text for comment in comments} == {"hi", "again"}


@pytest.mark.asyncio
async def test_comment_failures(runtime: FeedRuntime) -> None:
    assert (await runtime.interactions.add_comment("QmAny", "  ")).reason is FailureReason.INVALID
    assert (await runtime.interactions.add_comment("QmAny", "hello")).reason is FailureReason.OFFLINE

    await runtime.start()
    missing = await runtime.interactions.add_comment("QmMissing", "hello")
    assert missing.reason is FailureReason.NOT_FOUND


@pytest.mark.asyncio
async def test_pending_post_cannot_be_liked_or_commented(
    runtime: FeedRuntime,
    memory_backend: MemoryBackend,
    mocker: MockerFixture,
) -> None:
    await runtime.start()
    memory_backend.read_only = True
    created = await runtime.posts.create("not uploaded yet")
    memory_backend.read_only = False
    cid = created.item.cid
    assert created.item.is_synced is False

    channel = runtime.connection.active_channel()
    like_toggle = mocker.spy(channel, "like_toggle")
    add_comment = mocker.spy(channel, "add_comment")

    liked = await runtime.interactions.toggle_like(cid)
    commented = await runtime.interactions.add_comment(cid, "hi")

    assert liked.reason is FailureReason.CONFLICT
    assert liked.message == "Upload the post before liking it."
    assert commented.reason is FailureReason.CONFLICT
    assert commented.message == "Upload the post before commenting on it."
    like_toggle.assert_not_called()
    add_comment.assert_not_called()
    assert cid not in memory_backend.posts


@pytest.mark.asyncio
async def test_post_accepts_likes_once_retried(runtime: FeedRuntime, memory_backend: MemoryBackend) -> None:
    await runtime.start()
    memory_backend.read_only = True
    created = await runtime.posts.create("second try")
    memory_backend.read_only = False
    cid = created.item.cid

    assert (await runtime.posts.retry(cid)).ok
    assert (await runtime.interactions.toggle_like(cid)).ok
    assert (await runtime.interactions.add_comment(cid, "made it")).ok
    assert memory_backend.posts[cid]["likes"] == {runtime.store.device_id(): True}
