# tests/test_local_store.py
"""Tests for the durable local cache."""

from __future__ import annotations

import re

from netnook.repositories.local_store import CONFIG_KEY, DATA_KEY, LocalCacheStore
from netnook.schemas.connection import RemoteConfig
from netnook.schemas.content import AppState, Category, ContentItem
from netnook.schemas.profile import ProfileExtension


def _item(cid: str = "Qm1") -> ContentItem:
    return ContentItem(
        cid=cid,
        file_name="hello",
        file_type="text/plain",
        data="data:text/plain;base64,aGVsbG8=",
        timestamp=1000,
        category=Category.EDUCATION,
        author_id="user_abc",
    )


def test_load_without_saved_state_is_empty(store: LocalCacheStore) -> None:
    assert store.load() == AppState()


def test_save_then_load(store: LocalCacheStore) -> None:
    state = AppState().with_items(Category.EDUCATION, [_item()])
    store.save(state)

    loaded = store.load()
    assert loaded == state
    assert loaded.items_in(Category.NEWS) == []


def test_state_is_stored_with_camel_case_keys(store: LocalCacheStore) -> None:
    store.save(AppState().with_items(Category.EDUCATION, [_item()]))
    raw = store._get(DATA_KEY)
    assert raw is not None
    assert '"isSynced":false' in raw
    assert '"fileType":"text/plain"' in raw


def test_save_replaces_wholesale(store: LocalCacheStore) -> None:
    store.save(AppState().with_items(Category.EDUCATION, [_item("Qm1")]))
    store.save(AppState().with_items(Category.NEWS, [_item("Qm2")]))
    loaded = store.load()
    assert loaded.items_in(Category.EDUCATION) == []
    assert [item.cid for item in loaded.items_in(Category.NEWS)] == ["Qm2"]


def test_malformed_state_loads_as_empty(store: LocalCacheStore) -> None:
    store._put(DATA_KEY, "{not json")
    assert store.load() == AppState()


def test_device_id_is_minted_once(session_factory, store: LocalCacheStore) -> None:
    device_id = store.device_id()
    assert re.fullmatch(r"user_[a-z0-9]{9}", device_id)
    assert store.device_id() == device_id
    assert LocalCacheStore(session_factory).device_id() == device_id


def test_connection_config_lifecycle(store: LocalCacheStore) -> None:
    assert store.load_connection_config() is None
    config = RemoteConfig(database_url="https://node.example.com", api_key="k")
    store.save_connection_config(config)
    assert store.load_connection_config() == config
    assert '"databaseURL"' in (store._get(CONFIG_KEY) or "")

    store.clear_connection_config()
    assert store.load_connection_config() is None


def test_profile_extension_is_per_uid(store: LocalCacheStore) -> None:
    store.save_profile_extension("uid-1", ProfileExtension(profession="Pharmacist"))
    assert store.load_profile_extension("uid-1") == ProfileExtension(profession="Pharmacist")
    assert store.load_profile_extension("uid-2") is None
