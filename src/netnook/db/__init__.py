# src/netnook/db/__init__.py
"""Database helpers for the local cache."""
