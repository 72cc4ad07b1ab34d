"""NetNook: a local-first content feed with remote reconciliation."""

__version__ = "0.1.0"
