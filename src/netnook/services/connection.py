"""Process-wide handle on the single live remote channel.

The handle moves through ``UNINITIALIZED -> CONNECTED(config) -> TORN_DOWN``.
A new ``connect`` always tears down the previous channel first unless the
configuration is unchanged.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import ValidationError

from netnook.core.settings import settings
from netnook.schemas.connection import RemoteConfig
from netnook.services.remote import RemoteChannel, channel_for

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[RemoteConfig], RemoteChannel]

_ASSIGNMENT_PREFIX = re.compile(r"^(export\s+)?(const|var|let)\s+\w+\s*=\s*")
_TRAILING_SEMICOLON = re.compile(r";\s*$")


class ConnectionState(Enum):
    """Lifecycle of the remote connection handle."""

    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    TORN_DOWN = "torn_down"


def default_remote_config() -> RemoteConfig | None:
    """Return the public network configuration, or ``None`` when disabled."""
    if not settings.remote_enabled or not settings.remote_database_url:
        return None
    return RemoteConfig(
        api_key=settings.remote_api_key,
        auth_domain=settings.remote_auth_domain,
        database_url=settings.remote_database_url,
        project_id=settings.remote_project_id,
        auth_token=settings.remote_auth_token,
    )


def parse_config_text(text: str) -> RemoteConfig:
    """Parse a pasted configuration snippet.

    Accepts plain JSON or a JavaScript assignment such as
    ``const firebaseConfig = {...};``.

    Raises:
        ValueError: If the text is empty or not a valid configuration object.
    """
    cleaned = _TRAILING_SEMICOLON.sub("", _ASSIGNMENT_PREFIX.sub("", text.strip()))
    if not cleaned:
        raise ValueError("Please paste your configuration JSON.")
    try:
        payload: Any = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON format. Please ensure you copied the object correctly.") from exc
    if not isinstance(payload, dict):
        raise ValueError("Configuration must be a JSON object.")
    try:
        return RemoteConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc.error_count()} error(s)") from exc


class RemoteConnection:
    """Owns the one live :class:`RemoteChannel` of the process."""

    def __init__(self, channel_factory: ChannelFactory | None = None) -> None:
        self._channel_factory = channel_factory or channel_for
        self.state = ConnectionState.UNINITIALIZED
        self.config: RemoteConfig | None = None
        self.channel: RemoteChannel | None = None

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED and self.channel is not None

    async def connect(self, config: RemoteConfig) -> bool:
        """Connect to ``config``; returns ``False`` instead of raising on failure."""
        if self.is_connected and config == self.config:
            return True
        await self.disconnect()

        channel = self._channel_factory(config)
        if not await channel.connect(config):
            logger.warning("Could not connect to remote %s", config.database_url)
            return False

        self.channel = channel
        self.config = config
        self.state = ConnectionState.CONNECTED
        logger.info("Connected to remote %s", config.database_url)
        return True

    async def disconnect(self) -> None:
        """Tear down the live channel, releasing its subscriptions."""
        channel, self.channel = self.channel, None
        if channel is not None:
            await channel.disconnect()
            logger.info("Disconnected from remote %s", self.config.database_url if self.config else None)
        self.config = None
        if self.state is ConnectionState.CONNECTED:
            self.state = ConnectionState.TORN_DOWN

    def active_channel(self) -> RemoteChannel | None:
        """Return the live channel, or ``None`` when offline."""
        return self.channel if self.is_connected else None


class _ConnectionSingleton:
    """Singleton wrapper for RemoteConnection."""

    _instance: RemoteConnection | None = None

    @classmethod
    def get_instance(cls) -> RemoteConnection:
        """Get or create the singleton RemoteConnection instance."""
        if cls._instance is None:
            cls._instance = RemoteConnection()
        return cls._instance


def get_connection() -> RemoteConnection:
    """Return the process-wide remote connection."""
    return _ConnectionSingleton.get_instance()
