"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, TimestampMixin, AuditReferenceMixin and AccountMixin
(the column set shared by the user and admin account tables).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from libris.shared.utils.generators import generate_cuid

# (hash column, expiry column) pairs that must be set or cleared together.
TOKEN_COLUMN_PAIRS: tuple[tuple[str, str], ...] = (
    ("email_verify_token_hash", "email_verify_token_expires_at"),
    ("reset_password_token_hash", "reset_password_token_expires_at"),
)


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class AuditReferenceMixin:
    """created_by / updated_by: id of the account that made the change (either kind, so no FK)."""

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)


class AccountMixin(CuidMixin, TimestampMixin, AuditReferenceMixin):
    """Columns shared by every account kind: identity, credential, tokens, login history."""

    name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True, index=True)
    mobile: Mapped[str | None] = mapped_column(String(32), nullable=True, unique=True)
    # reserved: stored and migrated, no lifecycle operation manages it yet
    secondary_emails: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    hashed_password: Mapped[str | None] = mapped_column(String, nullable=True)
    must_change_password: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    is_email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    email_verify_token_hash: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    email_verify_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    reset_password_token_hash: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    reset_password_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    failed_logins: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    successful_logins: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    failed_login_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    @classmethod
    def token_pair_constraints(cls, table: str) -> tuple[CheckConstraint, ...]:
        """CHECK constraints: each token hash is NULL exactly when its expiry is NULL."""
        return tuple(
            CheckConstraint(
                f"({hash_col} IS NULL) = ({expiry_col} IS NULL)",
                name=f"ck_{table}_{hash_col}_paired",
            )
            for hash_col, expiry_col in TOKEN_COLUMN_PAIRS
        )
