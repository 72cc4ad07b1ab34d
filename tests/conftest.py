# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ["NETNOOK_DATABASE_URL"] = "sqlite://"
os.environ["NETNOOK_REMOTE_ENABLED"] = "false"

from netnook.api.v1.dependencies import get_runtime_dep
from netnook.db.session import Base
from netnook.main import app as fastapi_app
from netnook.repositories.local_store import LocalCacheStore
from netnook.schemas.connection import RemoteConfig
from netnook.services import runtime as runtime_module
from netnook.services.connection import RemoteConnection
from netnook.services.identity import LocalIdentityProvider
from netnook.services.remote import MemoryBackend, get_memory_backend
from netnook.services.runtime import FeedRuntime

TEST_DB_URL = "sqlite://"
MEMORY_CONFIG = RemoteConfig(database_url="memory://test")
PRIVATE_CONFIG = RemoteConfig(database_url="memory://private", project_id="private-node")
START_MILLIS = 1000


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, start: int = START_MILLIS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int = 1) -> int:
        self.now += millis
        return self.now


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def store(session_factory: sessionmaker[Session]) -> LocalCacheStore:
    return LocalCacheStore(session_factory)


@pytest.fixture()
def memory_backend() -> Iterator[MemoryBackend]:
    backend = get_memory_backend("test")
    backend.reset()
    try:
        yield backend
    finally:
        backend.reset()


@pytest.fixture()
def private_backend() -> Iterator[MemoryBackend]:
    backend = get_memory_backend("private")
    backend.reset()
    try:
        yield backend
    finally:
        backend.reset()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def identity_provider() -> LocalIdentityProvider:
    return LocalIdentityProvider()


@pytest.fixture()
def runtime(
    store: LocalCacheStore,
    memory_backend: MemoryBackend,
    identity_provider: LocalIdentityProvider,
    clock: FakeClock,
) -> FeedRuntime:
    """Runtime wired to the in-memory public network; call ``start`` to connect."""
    return FeedRuntime(
        store,
        RemoteConnection(),
        identity_provider,
        clock,
        default_config=MEMORY_CONFIG,
    )


@pytest.fixture()
def offline_runtime(store: LocalCacheStore, clock: FakeClock) -> FeedRuntime:
    """Runtime with no default network configured."""
    return FeedRuntime(store, RemoteConnection(), LocalIdentityProvider(), clock)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, runtime: FeedRuntime, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """API client whose startup and shutdown drive the test runtime."""
    monkeypatch.setattr(runtime_module._RuntimeSingleton, "_instance", runtime)
    app.dependency_overrides[get_runtime_dep] = lambda: runtime
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_runtime_dep, None)
