"""initial_account_tables_users_admins

Revision ID: 3f9c2a7d1b04
Revises:
Create Date: 2026-10-18 09:12:44.118203

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9c2a7d1b04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TOKEN_PAIRS = (
    ("email_verify_token_hash", "email_verify_token_expires_at"),
    ("reset_password_token_hash", "reset_password_token_expires_at"),
)


def _account_columns() -> list[sa.Column]:
    """Columns shared by users and admins (AccountMixin)."""
    return [
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("mobile", sa.String(length=32), nullable=True),
        sa.Column("secondary_emails", sa.JSON(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=True),
        sa.Column("must_change_password", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_email_verified", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("email_verify_token_hash", sa.String(length=64), nullable=True),
        sa.Column("email_verify_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reset_password_token_hash", sa.String(length=64), nullable=True),
        sa.Column("reset_password_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failed_logins", sa.JSON(), nullable=False),
        sa.Column("successful_logins", sa.JSON(), nullable=False),
        sa.Column("failed_login_attempts", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("updated_by", sa.String(), nullable=True),
    ]


def _pair_checks(table: str) -> list[sa.CheckConstraint]:
    return [
        sa.CheckConstraint(
            f"({hash_col} IS NULL) = ({expiry_col} IS NULL)",
            name=f"ck_{table}_{hash_col}_paired",
        )
        for hash_col, expiry_col in TOKEN_PAIRS
    ]


def _create_account_table(table: str, *extra: sa.Column) -> None:
    op.create_table(
        table,
        *_account_columns(),
        *extra,
        *_pair_checks(table),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mobile"),
    )
    op.create_index(op.f(f"ix_{table}_email"), table, ["email"], unique=True)
    op.create_index(
        op.f(f"ix_{table}_email_verify_token_hash"), table, ["email_verify_token_hash"], unique=False
    )
    op.create_index(
        op.f(f"ix_{table}_reset_password_token_hash"), table, ["reset_password_token_hash"], unique=False
    )


def upgrade() -> None:
    """Upgrade schema."""
    _create_account_table("users")
    _create_account_table(
        "admins",
        sa.Column("designation", sa.String(length=120), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table in ("admins", "users"):
        op.drop_index(op.f(f"ix_{table}_reset_password_token_hash"), table_name=table)
        op.drop_index(op.f(f"ix_{table}_email_verify_token_hash"), table_name=table)
        op.drop_index(op.f(f"ix_{table}_email"), table_name=table)
        op.drop_table(table)
