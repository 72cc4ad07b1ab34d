"""Data access layer for NetNook."""

from .local_store import LocalCacheStore

__all__ = ["LocalCacheStore"]
