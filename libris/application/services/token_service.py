"""Single-use verification and password-reset tokens.

The plain token travels only in the emailed link. The account stores the
SHA-256 hex digest and an expiry; possession of the plain value is the only
way to pass validation. Consumers clear both stored fields on success so a
token cannot be replayed.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from libris.shared.utils.datetime import ensure_utc, utc_now

DEFAULT_TOKEN_TTL = timedelta(hours=1)
TOKEN_ENTROPY_BYTES = 32


@dataclass(frozen=True)
class IssuedToken:
    """A freshly minted token: plain value for the link, hash + expiry for storage."""

    plain_token: str
    hashed_token: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"IssuedToken(hashed_token={self.hashed_token[:8]}..., expires_at={self.expires_at.isoformat()})"


class VerificationTokenGenerator:
    """Issue and check emailed single-use tokens. Pure apart from entropy and clock."""

    def __init__(self, ttl: timedelta = DEFAULT_TOKEN_TTL) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @staticmethod
    def hash_token(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def issue(self, now: datetime | None = None) -> IssuedToken:
        """Return a new URL-safe plain token, its digest and its expiry (now + ttl)."""
        plain = secrets.token_urlsafe(TOKEN_ENTROPY_BYTES)
        issued_at = ensure_utc(now) or utc_now()
        return IssuedToken(
            plain_token=plain,
            hashed_token=self.hash_token(plain),
            expires_at=issued_at + self._ttl,
        )

    def validate(
        self,
        presented: str,
        stored_hash: str | None,
        expires_at: datetime | None,
        now: datetime | None = None,
    ) -> bool:
        """True only if digest(presented) equals stored_hash and now < expires_at.

        A cleared pair (None) never validates, which is what makes a consumed
        token single-use.
        """
        if not presented or not stored_hash or expires_at is None:
            return False
        current = ensure_utc(now) or utc_now()
        if not current < ensure_utc(expires_at):
            return False
        return hmac.compare_digest(self.hash_token(presented), stored_hash)
