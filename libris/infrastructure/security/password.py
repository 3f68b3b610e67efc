"""Password hashing (bcrypt with SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; pre-hashing with SHA-256 yields a fixed-length
input so long passwords are not silently truncated. The work factor comes from
settings.bcrypt_rounds (default 10). Both functions are CPU-bound; async callers
run them with asyncio.to_thread.
"""

import base64
import hashlib

import bcrypt

from libris.core.config import get_settings


def _prehash(password: str) -> bytes:
    """SHA-256 pre-hash to avoid bcrypt's 72-byte truncation."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Return True if plain_password matches hashed_password.

    A missing or malformed hash never matches. bcrypt.checkpw compares in
    constant time.
    """
    if not hashed_password:
        return False
    try:
        result = bcrypt.checkpw(
            _prehash(plain_password),
            hashed_password.encode("utf-8"),
        )
        return bool(result)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str, rounds: int | None = None) -> str:
    """Return bcrypt hash of password (SHA-256 pre-hashed before bcrypt)."""
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(_prehash(password), salt)
    return hashed.decode("utf-8")
