"""ORM models. Importing this package registers every table on Base.metadata."""

from libris.infrastructure.persistence.models.account import Admin, User
from libris.infrastructure.persistence.models.mixins import (
    TOKEN_COLUMN_PAIRS,
    AccountMixin,
    AuditReferenceMixin,
    CuidMixin,
    TimestampMixin,
)

__all__ = [
    "TOKEN_COLUMN_PAIRS",
    "AccountMixin",
    "Admin",
    "AuditReferenceMixin",
    "CuidMixin",
    "TimestampMixin",
    "User",
]
