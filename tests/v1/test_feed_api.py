# tests/v1/test_feed_api.py
"""Tests for the feed endpoints."""

from fastapi import status

from netnook.schemas.content import Category, ContentItem
from netnook.services.remote import MemoryBackend, outbound_record
from netnook.utils.codec import encode_text_payload


def _create(client, text: str, **extra) -> dict:
    response = client.post("/api/v1/posts", json={"text": text, **extra})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["item"]


def test_empty_feed(client) -> None:
    response = client.get("/api/v1/feed")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["items"] == []
    assert body["online"] is True
    assert body["tab"] == "global"


def test_feed_lists_new_posts_newest_first(client, clock) -> None:
    first = _create(client, "first post")
    clock.advance(10)
    second = _create(client, "second post", category="news")

    items = client.get("/api/v1/feed").json()["items"]

    assert [item["cid"] for item in items] == [second["cid"], first["cid"]]
    assert items[0]["isSynced"] is True
    assert items[0]["fileType"] == "text/plain"


def test_feed_tab_and_search(client, clock) -> None:
    _create(client, "notes on photosynthesis")
    clock.advance(1)
    news = _create(client, "election results", category="news")

    by_tab = client.get("/api/v1/feed", params={"tab": "news"}).json()["items"]
    assert [item["cid"] for item in by_tab] == [news["cid"]]

    searched = client.get("/api/v1/feed", params={"q": "PHOTO"}).json()
    assert len(searched["items"]) == 1
    assert searched["query"] == "PHOTO"


def test_unknown_tab(client) -> None:
    response = client.get("/api/v1/feed", params={"tab": "sports"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_get_item(client) -> None:
    created = _create(client, "look me up")
    response = client.get(f"/api/v1/feed/{created['cid']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["cid"] == created["cid"]


def test_get_item_outside_snapshot_window(client, runtime, memory_backend: MemoryBackend) -> None:
    old = ContentItem(
        cid="QmOld",
        file_name="archived",
        file_type="text/plain",
        data=encode_text_payload("archived"),
        timestamp=1,
        category=Category.EDUCATION,
        author_id="uid-bob",
    )
    # Present in the store but not delivered in any snapshot.
    memory_backend.posts["QmOld"] = outbound_record(old)
    assert runtime.state.find("QmOld") is None

    response = client.get("/api/v1/feed/QmOld")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["fileName"] == "archived"


def test_get_unknown_item(client) -> None:
    response = client.get("/api/v1/feed/QmMissing")
    assert response.status_code == status.HTTP_404_NOT_FOUND
