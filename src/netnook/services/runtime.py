"""Feed runtime: wires the local cache, the remote connection and identity.

The runtime owns the two long-lived subscriptions (remote feed and identity).
Both are released before the connection is swapped, and snapshots delivered
by an earlier subscription generation are ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from netnook.db.time import now_millis
from netnook.repositories.local_store import LocalCacheStore
from netnook.schemas.connection import RemoteConfig
from netnook.schemas.content import ContentItem
from netnook.services.connection import RemoteConnection, default_remote_config, get_connection
from netnook.services.feed_state import FeedState
from netnook.services.identity import IdentityProvider, IdentitySession
from netnook.services.interactions import InteractionService
from netnook.services.post_service import PostLifecycleManager
from netnook.services.subscription import Subscription

logger = logging.getLogger(__name__)


class FeedRuntime:
    """Process-level composition of the feed core."""

    def __init__(
        self,
        store: LocalCacheStore | None = None,
        connection: RemoteConnection | None = None,
        identity_provider: IdentityProvider | None = None,
        clock: Callable[[], int] = now_millis,
        default_config: RemoteConfig | None = None,
    ) -> None:
        self.store = store or LocalCacheStore()
        self.connection = connection or get_connection()
        self.state = FeedState()
        self.identity = IdentitySession(self.store, identity_provider)
        self.posts = PostLifecycleManager(self.store, self.connection, self.state, self.identity, clock)
        self.interactions = InteractionService(self.connection, self.state, self.identity, clock)
        self.default_config = default_config if default_config is not None else default_remote_config()
        self.using_custom_config = False
        self._feed_subscription: Subscription | None = None
        self._identity_subscription: Subscription | None = None
        self._generation = 0

    @property
    def is_online(self) -> bool:
        return self.connection.is_connected

    async def start(self) -> None:
        """Load the local cache and connect to the saved or default remote."""
        self.state.local = self.store.load()
        saved = self.store.load_connection_config()
        if saved is not None:
            if await self._connect(saved):
                self.using_custom_config = True
                return
            logger.warning("Saved private node is unreachable; falling back to the public network")
            self.store.clear_connection_config()
        await self._connect_default()

    async def shutdown(self) -> None:
        self._release_subscriptions()
        await self.connection.disconnect()

    async def connect_custom(self, config: RemoteConfig) -> bool:
        """Switch to a private node, restoring the previous connection on failure."""
        previous = self.connection.config
        if await self._connect(config):
            self.using_custom_config = True
            self.store.save_connection_config(config)
            return True
        if previous is not None:
            await self._connect(previous)
        return False

    async def reset_to_default(self) -> bool:
        """Forget the private node and reconnect to the public network."""
        self.store.clear_connection_config()
        self.using_custom_config = False
        return await self._connect_default()

    async def _connect_default(self) -> bool:
        if self.default_config is None:
            logger.info("No default remote configured; running offline")
            self._release_subscriptions()
            await self.connection.disconnect()
            self.state.remote = []
            return False
        connected = await self._connect(self.default_config)
        self.using_custom_config = False
        return connected

    async def _connect(self, config: RemoteConfig) -> bool:
        self._release_subscriptions()
        if not await self.connection.connect(config):
            self.state.remote = []
            return False
        self._subscribe()
        return True

    def _subscribe(self) -> None:
        channel = self.connection.active_channel()
        if channel is None:
            return
        self._generation += 1
        generation = self._generation
        self._feed_subscription = channel.subscribe(
            lambda items: self._on_snapshot(generation, items)
        )
        self._identity_subscription = self.identity.watch()

    def _release_subscriptions(self) -> None:
        # Bump first so anything still in flight from the old channel is dropped.
        self._generation += 1
        for subscription in (self._feed_subscription, self._identity_subscription):
            if subscription is not None:
                subscription.close()
        self._feed_subscription = None
        self._identity_subscription = None

    def _on_snapshot(self, generation: int, items: list[ContentItem]) -> None:
        if generation != self._generation:
            logger.debug("Dropping snapshot from stale subscription generation %d", generation)
            return
        self.state.remote = items

    def feed(self) -> list[ContentItem]:
        """Return the merged view."""
        return self.state.merged()


class _RuntimeSingleton:
    """Singleton wrapper for FeedRuntime."""

    _instance: FeedRuntime | None = None

    @classmethod
    def get_instance(cls) -> FeedRuntime:
        if cls._instance is None:
            cls._instance = FeedRuntime()
        return cls._instance


def get_runtime() -> FeedRuntime:
    """Return the process-wide feed runtime."""
    return _RuntimeSingleton.get_instance()
