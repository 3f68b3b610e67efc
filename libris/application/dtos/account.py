"""Account read-models. Secret fields never appear here."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class LoginDeviceRecord:
    """One entry of the failed/successful login history."""

    device: dict[str, Any]
    at: datetime

    def to_json(self) -> dict[str, Any]:
        return {"device": self.device, "at": self.at.isoformat()}


@dataclass(frozen=True)
class AccountView:
    """Account read-model returned to callers (no password or token hashes)."""

    id: str
    kind: str
    name: str | None
    email: str
    mobile: str | None
    is_email_verified: bool
    is_active: bool
    must_change_password: bool
    designation: str | None = None
    permissions: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionTokens:
    """Access and refresh session tokens minted at login."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime | None = None
