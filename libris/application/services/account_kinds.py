"""Account kinds: the small capability set that differs between users and admins.

The identity lifecycle is written once and parameterized by one of these.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from libris.domain.enums import AccountKindName


def _no_permissions(account: Any) -> list[str]:
    return []


def _stored_permissions(account: Any) -> list[str]:
    return [str(p) for p in (getattr(account, "permissions", None) or [])]


@dataclass(frozen=True)
class AccountKind:
    """What makes one account kind different from the other.

    Attributes:
        name: 'user' or 'admin'; stamped into session tokens.
        label: Human label used in messages ("User", "Admin").
        route_prefix: Path under /api/v1 where this kind's auth routes live
            (used to build emailed links).
        requires_password_on_signup: Signup body carries password + confirmation.
        issues_temp_password_on_verify: Verification generates a temporary
            password, forces a reset and sends the welcome email.
        extra_fields: Kind-specific columns accepted at signup.
        permissions_for: Permission snapshot placed in session tokens.
    """

    name: AccountKindName
    label: str
    route_prefix: str
    requires_password_on_signup: bool
    issues_temp_password_on_verify: bool
    extra_fields: tuple[str, ...] = ()
    permissions_for: Callable[[Any], list[str]] = _no_permissions

    def verify_link(self, base_url: str, plain_token: str) -> str:
        return f"{base_url.rstrip('/')}{self.route_prefix}/verify/{plain_token}"

    def resend_link(self, base_url: str, account_id: str) -> str:
        return f"{base_url.rstrip('/')}{self.route_prefix}/resend-verification/{account_id}"

    def reset_link(self, base_url: str, plain_token: str) -> str:
        return f"{base_url.rstrip('/')}{self.route_prefix}/reset-password/{plain_token}"


USER_KIND = AccountKind(
    name=AccountKindName.USER,
    label="User",
    route_prefix="/api/v1/auth",
    requires_password_on_signup=True,
    issues_temp_password_on_verify=False,
)

ADMIN_KIND = AccountKind(
    name=AccountKindName.ADMIN,
    label="Admin",
    route_prefix="/api/v1/auth/admin",
    requires_password_on_signup=False,
    issues_temp_password_on_verify=True,
    extra_fields=("designation", "permissions"),
    permissions_for=_stored_permissions,
)


def other_kind(kind: AccountKind) -> AccountKind:
    """The kind whose emails are off-limits to kind (user and admin identities are exclusive)."""
    return ADMIN_KIND if kind.name is AccountKindName.USER else USER_KIND
