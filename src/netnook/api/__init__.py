"""HTTP API for NetNook."""
