"""Remote sync channels."""

from netnook.schemas.connection import RemoteConfig

from .base import (
    RemoteChannel,
    RemoteError,
    RemoteUnavailableError,
    SnapshotCallback,
    WriteResult,
    outbound_record,
)
from .firebase import FirebaseRealtimeChannel
from .memory import MEMORY_SCHEME, MemoryBackend, MemoryChannel, get_memory_backend


def channel_for(config: RemoteConfig) -> RemoteChannel:
    """Return a channel implementation suited to ``config``'s database URL."""
    if (config.database_url or "").startswith(MEMORY_SCHEME):
        return MemoryChannel()
    return FirebaseRealtimeChannel()


__all__ = [
    "FirebaseRealtimeChannel",
    "MEMORY_SCHEME",
    "MemoryBackend",
    "MemoryChannel",
    "RemoteChannel",
    "RemoteError",
    "RemoteUnavailableError",
    "SnapshotCallback",
    "WriteResult",
    "channel_for",
    "get_memory_backend",
    "outbound_record",
]
