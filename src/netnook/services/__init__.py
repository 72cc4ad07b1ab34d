"""Service layer for NetNook: remote channels, post lifecycle and feed runtime."""
