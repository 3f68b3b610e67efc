"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Protocol

from libris.domain.enums import SessionTokenType


class INotificationDispatcher(Protocol):
    """Transactional email transport. Constructed once at startup and injected."""

    async def connect(self) -> None:
        """Open (or re-open) the transport."""

    async def send(self, to_address: str, subject: str, html_body: str) -> None:
        """Deliver one message. Raises on transport failure."""

    async def close(self) -> None:
        """Release the transport."""


class INotifier(Protocol):
    """Best-effort notification front used by the lifecycle manager."""

    def notify(self, to_address: str, template_key: str, context: dict[str, Any]) -> None:
        """Schedule delivery of a templated email; never raises for delivery failures."""


class IRevocationStore(Protocol):
    """Blocklist of session token ids (used only when revocation is enabled)."""

    async def revoke(self, token_id: str, expires_at: datetime) -> None:
        """Blocklist token_id until expires_at."""

    async def is_revoked(self, token_id: str) -> bool:
        """Return True if token_id was revoked and has not yet expired."""


class ISessionTokenIssuer(Protocol):
    """Mints and validates signed session tokens (see infrastructure.security.jwt)."""

    def issue(
        self,
        account_id: str,
        account_kind: str,
        permissions: list[str],
        device: dict[str, Any],
        token_type: SessionTokenType = SessionTokenType.ACCESS,
        expires_delta: timedelta | None = None,
        session_id: str | None = None,
    ) -> tuple[str, datetime]: ...

    def validate(
        self,
        token: str,
        expected_type: SessionTokenType | None = SessionTokenType.ACCESS,
    ) -> Any: ...
