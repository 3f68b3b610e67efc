"""Redis blocklist of revoked session token ids.

Used only when settings.session_revocation_enabled is True. Each revoked
token id is stored with a TTL equal to the token's remaining life, so the
blocklist never outgrows the set of still-valid tokens.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

import redis.asyncio as redis

from libris.core.config import Settings, get_settings
from libris.shared.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

KEY_PREFIX = "libris:revoked:"


def revoked_token_key(token_id: str) -> str:
    return f"{KEY_PREFIX}{token_id}"


class RedisRevocationStore:
    """IRevocationStore over Redis. Call connect() at startup and disconnect() at shutdown.

    When Redis is unreachable, revoke() logs and returns and is_revoked()
    reports False, so logout and authentication keep working.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Optional settings; defaults to get_settings().
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=(
                    self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None
                ),
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Revocation store connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Session revocation disabled.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Revocation store disconnected")

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    async def revoke(self, token_id: str, expires_at: datetime) -> None:
        """Blocklist token_id until expires_at. Already-expired tokens are skipped."""
        remaining = (ensure_utc(expires_at) - utc_now()).total_seconds()
        if remaining <= 0:
            return
        if not self.is_available() or self.redis is None:
            logger.warning("Revocation store unavailable; token %s not blocklisted", token_id)
            return
        try:
            await self.redis.set(revoked_token_key(token_id), "1", ex=math.ceil(remaining))
        except redis.RedisError:
            logger.exception("Failed to blocklist token %s", token_id)

    async def is_revoked(self, token_id: str) -> bool:
        if not self.is_available() or self.redis is None:
            return False
        try:
            return bool(await self.redis.exists(revoked_token_key(token_id)))
        except redis.RedisError:
            logger.exception("Revocation lookup failed for token %s", token_id)
            return False
