"""Adapters connecting the core to SQLite, the remote catalog, and logging."""
