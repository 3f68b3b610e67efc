"""Account ORM models: one table per account kind (users, admins)."""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from libris.infrastructure.persistence.database import Base
from libris.infrastructure.persistence.models.mixins import AccountMixin


class User(AccountMixin, Base):
    """Library member account. Table: users. Sets its password at signup."""

    __tablename__ = "users"
    __table_args__ = AccountMixin.token_pair_constraints("users")


class Admin(AccountMixin, Base):
    """Staff account. Table: admins. Receives a temporary password after email verification.

    designation and permissions feed the permission snapshot of session tokens.
    """

    __tablename__ = "admins"
    __table_args__ = AccountMixin.token_pair_constraints("admins")

    designation: Mapped[str | None] = mapped_column(String(120), nullable=True)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
