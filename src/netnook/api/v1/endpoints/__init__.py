# src/netnook/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .feed import router as feed_router
from .network import router as network_router
from .posts import router as posts_router
from .session import router as session_router

__all__ = [
    "feed_router",
    "posts_router",
    "network_router",
    "session_router",
]
