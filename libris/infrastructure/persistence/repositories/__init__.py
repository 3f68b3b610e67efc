"""Persistence repositories. Re-exports for dependency injection."""

from libris.infrastructure.persistence.repositories.account_repo import (
    AccountRepository,
    account_to_view,
)
from libris.infrastructure.persistence.repositories.base import BaseRepository

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "account_to_view",
]
