"""Repository interfaces (ports) for the application layer."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Protocol

from libris.application.dtos.account import AccountView, LoginDeviceRecord
from libris.application.services.token_service import IssuedToken


class IAccountRepository(Protocol):
    """Credential store contract for one account kind.

    Implementations persist single-row updates; token hash and expiry are
    written only through the set_*/clear_* helpers.
    """

    entity_type: str

    async def get_by_id(self, entity_id: str) -> Any | None: ...

    async def get_by_email(self, email: str) -> Any | None: ...

    async def get_by_email_verify_token_hash(self, token_hash: str) -> Any | None: ...

    async def get_by_reset_token_hash(self, token_hash: str) -> Any | None: ...

    async def create_account(self, **fields: Any) -> Any: ...

    async def update(self, obj: Any) -> Any: ...

    async def discard_changes(self) -> None: ...

    def to_view(self, account: Any) -> AccountView: ...

    def set_email_verify_token(self, account: Any, token: IssuedToken) -> None: ...

    def clear_email_verify_token(self, account: Any) -> None: ...

    def set_reset_password_token(self, account: Any, token: IssuedToken) -> None: ...

    def clear_reset_password_token(self, account: Any) -> None: ...

    async def record_failed_login(
        self,
        account: Any,
        record: LoginDeviceRecord,
        *,
        max_attempts: int,
        lock_duration: timedelta,
    ) -> Any: ...

    async def record_successful_login(self, account: Any, record: LoginDeviceRecord) -> Any: ...

    def locked_until(self, account: Any, now: datetime) -> datetime | None: ...
