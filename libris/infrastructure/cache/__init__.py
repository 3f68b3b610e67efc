"""Redis-backed stores."""

from libris.infrastructure.cache.revocation import RedisRevocationStore, revoked_token_key

__all__ = ["RedisRevocationStore", "revoked_token_key"]
