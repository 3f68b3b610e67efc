"""Account repository (users or admins). Token fields and login history helpers.

One instance is bound to one account table. Token hash/expiry pairs are only
ever written through set_*/clear_* so the pair is never half-set.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from libris.application.dtos.account import AccountView, LoginDeviceRecord
from libris.application.services.token_service import IssuedToken
from libris.domain.exceptions import DuplicateAccountException
from libris.infrastructure.persistence.models.account import Admin, User
from libris.infrastructure.persistence.repositories.base import BaseRepository
from libris.shared.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

AccountModel = User | Admin


def account_to_view(account: AccountModel, kind: str) -> AccountView:
    """Map an ORM account to the public read-model (no password or token hashes)."""
    return AccountView(
        id=account.id,
        kind=kind,
        name=account.name,
        email=account.email,
        mobile=account.mobile,
        is_email_verified=account.is_email_verified,
        is_active=account.is_active,
        must_change_password=account.must_change_password,
        designation=getattr(account, "designation", None),
        permissions=list(getattr(account, "permissions", None) or []),
        created_at=ensure_utc(account.created_at),
        updated_at=ensure_utc(account.updated_at),
    )


class AccountRepository(BaseRepository[Any]):
    """Credential store for one account kind."""

    def __init__(self, db: AsyncSession, model: type[User] | type[Admin]) -> None:
        super().__init__(db, model)

    @property
    def entity_type(self) -> str:
        return "admin" if self.model is Admin else "user"

    def to_view(self, account: AccountModel) -> AccountView:
        return account_to_view(account, self.entity_type)

    async def discard_changes(self) -> None:
        """Roll back everything this request wrote (used after an unexpected failure)."""
        await self.db.rollback()

    async def get_by_email(self, email: str) -> AccountModel | None:
        result = await self.db.execute(select(self.model).where(self.model.email == email))
        return result.scalar_one_or_none()

    async def get_by_email_verify_token_hash(self, token_hash: str) -> AccountModel | None:
        result = await self.db.execute(
            select(self.model).where(self.model.email_verify_token_hash == token_hash)
        )
        return result.scalars().first()

    async def get_by_reset_token_hash(self, token_hash: str) -> AccountModel | None:
        result = await self.db.execute(
            select(self.model).where(self.model.reset_password_token_hash == token_hash)
        )
        return result.scalars().first()

    async def create_account(self, **fields: Any) -> AccountModel:
        """Insert a new account; raise DuplicateAccountException on a unique violation.

        The insert runs in a SAVEPOINT so a concurrent duplicate only rolls back
        this statement, not the request transaction.
        """
        account = self.model(**fields)
        try:
            async with self.db.begin_nested():
                self.db.add(account)
            await self.db.refresh(account)
            await self._on_after_create(account)
            return account
        except IntegrityError:
            raise DuplicateAccountException(
                "This email address or mobile number is already registered.",
                other_kind=False,
            ) from None

    @staticmethod
    def set_email_verify_token(account: AccountModel, token: IssuedToken) -> None:
        account.email_verify_token_hash = token.hashed_token
        account.email_verify_token_expires_at = token.expires_at

    @staticmethod
    def clear_email_verify_token(account: AccountModel) -> None:
        account.email_verify_token_hash = None
        account.email_verify_token_expires_at = None

    @staticmethod
    def set_reset_password_token(account: AccountModel, token: IssuedToken) -> None:
        account.reset_password_token_hash = token.hashed_token
        account.reset_password_token_expires_at = token.expires_at

    @staticmethod
    def clear_reset_password_token(account: AccountModel) -> None:
        account.reset_password_token_hash = None
        account.reset_password_token_expires_at = None

    async def record_failed_login(
        self,
        account: AccountModel,
        record: LoginDeviceRecord,
        *,
        max_attempts: int,
        lock_duration: timedelta,
    ) -> AccountModel:
        """Append the failed device, bump the counter and lock once max_attempts is reached."""
        if account.locked_until is not None and ensure_utc(account.locked_until) <= record.at:
            # previous lock has run out; start a fresh window
            account.failed_login_attempts = 0
            account.locked_until = None
        account.failed_logins = [*(account.failed_logins or []), record.to_json()]
        account.failed_login_attempts = (account.failed_login_attempts or 0) + 1
        if account.failed_login_attempts >= max_attempts:
            account.locked_until = record.at + lock_duration
            logger.warning(
                "%s %s locked until %s after %d failed logins",
                self.entity_type,
                account.id,
                account.locked_until.isoformat(),
                account.failed_login_attempts,
            )
        return await self.update(account)

    async def record_successful_login(
        self, account: AccountModel, record: LoginDeviceRecord
    ) -> AccountModel:
        """Append the successful device and reset the failure counter and lock."""
        account.successful_logins = [*(account.successful_logins or []), record.to_json()]
        account.failed_login_attempts = 0
        account.locked_until = None
        return await self.update(account)

    @staticmethod
    def locked_until(account: AccountModel, now: datetime) -> datetime | None:
        """Return the lock expiry when the account is still locked at now, else None."""
        until = ensure_utc(account.locked_until)
        if until is not None and now < until:
            return until
        return None
