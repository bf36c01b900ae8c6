"""Adapters for external services (object store, email, identity lookups)."""
