"""Adapters for external systems (email)."""
