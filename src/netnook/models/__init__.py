# src/netnook/models/__init__.py
"""SQLAlchemy models for the NetNook local cache."""

from .local_record import LocalRecord

__all__ = ["LocalRecord"]
