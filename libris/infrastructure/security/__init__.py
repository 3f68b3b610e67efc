"""Security: session tokens (JWT) and password hashing."""

from libris.infrastructure.security.jwt import SessionClaims, SessionTokenIssuer, TokenType
from libris.infrastructure.security.password import get_password_hash, verify_password

__all__ = [
    "SessionClaims",
    "SessionTokenIssuer",
    "TokenType",
    "get_password_hash",
    "verify_password",
]
