# src/netnook/schemas/__init__.py
"""Pydantic schemas for NetNook."""

from .connection import RemoteConfig
from .content import TEXT_POST_TYPE, AppState, Category, Comment, ContentItem, PostPatch
from .profile import ProfileExtension, ProviderIdentity, UserProfile

__all__ = [
    "TEXT_POST_TYPE",
    "AppState",
    "Category",
    "Comment",
    "ContentItem",
    "PostPatch",
    "ProfileExtension",
    "ProviderIdentity",
    "RemoteConfig",
    "UserProfile",
]
