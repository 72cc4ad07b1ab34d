# src/netnook/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import feed_router, network_router, posts_router, session_router

__all__ = [
    "feed_router",
    "posts_router",
    "network_router",
    "session_router",
]
