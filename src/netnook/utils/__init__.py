"""Utility helpers for NetNook."""
