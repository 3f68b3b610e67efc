"""Session token issuance and validation (JWT).

Tokens are self-contained: validity means a good signature, the expected
token type and an unexpired `exp`. Revocation is not consulted here; the
optional blocklist lives in libris.infrastructure.cache.revocation and is
checked by the authentication dependency.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from libris.core.config import Settings, get_settings
from libris.domain.enums import SessionTokenType
from libris.domain.exceptions import AuthenticationException
from libris.shared.utils.datetime import from_timestamp_utc, utc_now

TokenType = SessionTokenType


@dataclass(frozen=True)
class SessionClaims:
    """Decoded claims of a valid session token."""

    token_id: str
    session_id: str
    account_id: str
    account_kind: str
    permissions: list[str]
    device: dict[str, Any]
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


class SessionTokenIssuer:
    """Mint and validate signed, time-limited session tokens bound to a device fingerprint."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def _horizon(self, token_type: TokenType) -> timedelta:
        if token_type is TokenType.REFRESH:
            return timedelta(days=self._settings.refresh_token_expire_days)
        return timedelta(minutes=self._settings.access_token_expire_minutes)

    def issue(
        self,
        account_id: str,
        account_kind: str,
        permissions: list[str],
        device: dict[str, Any],
        token_type: TokenType = TokenType.ACCESS,
        expires_delta: timedelta | None = None,
        session_id: str | None = None,
    ) -> tuple[str, datetime]:
        """Create a signed token; return (encoded_token, expires_at).

        Args:
            account_id: Issuing account id (becomes `sub`).
            account_kind: 'user' or 'admin'.
            permissions: Permission snapshot at issuance.
            device: Device fingerprint of the login request.
            token_type: Access or refresh horizon.
            expires_delta: Optional TTL override; else the configured horizon.
            session_id: Login session shared by the access and refresh tokens
                of one login; defaults to the token id.
        """
        now = utc_now()
        expires_at = now + (expires_delta if expires_delta is not None else self._horizon(token_type))
        token_id = uuid.uuid4().hex
        to_encode: dict[str, Any] = {
            "jti": token_id,
            "sid": session_id or token_id,
            "sub": account_id,
            "kind": account_kind,
            "permissions": list(permissions),
            "device": dict(device),
            "typ": token_type.value,
            "iat": int(now.timestamp()),
            "exp": expires_at,
        }
        encoded = jwt.encode(
            to_encode,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )
        return cast(str, encoded), expires_at

    def validate(
        self,
        token: str,
        expected_type: TokenType | None = TokenType.ACCESS,
    ) -> SessionClaims:
        """Verify signature and expiry and return the claims.

        Raises:
            AuthenticationException: If the token is malformed, badly signed,
                expired, missing required claims or of the wrong type.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
                options={"require_exp": True, "require_sub": True, "require_jti": True},
            )
        except JWTError as e:
            raise AuthenticationException(f"Invalid session token: {e!s}") from e
        try:
            token_type = TokenType(payload.get("typ", TokenType.ACCESS.value))
        except ValueError as e:
            raise AuthenticationException("Invalid session token type") from e
        if expected_type is not None and token_type is not expected_type:
            raise AuthenticationException(
                f"Expected a {expected_type.value} token, got {token_type.value}"
            )
        return SessionClaims(
            token_id=payload["jti"],
            session_id=payload.get("sid") or payload["jti"],
            account_id=payload["sub"],
            account_kind=payload.get("kind", ""),
            permissions=list(payload.get("permissions") or []),
            device=dict(payload.get("device") or {}),
            token_type=token_type,
            issued_at=from_timestamp_utc(payload.get("iat", 0)),
            expires_at=from_timestamp_utc(payload["exp"]),
            raw=payload,
        )
