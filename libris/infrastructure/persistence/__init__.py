"""Persistence: SQLAlchemy engine/session, account models and repositories."""
