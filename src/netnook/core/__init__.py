"""Core configuration for NetNook."""
