"""Domain layer: account kinds, error kinds and exceptions (no infrastructure imports)."""

from libris.domain.enums import ErrorKind
from libris.domain.exceptions import (
    AccountLockedException,
    AuthenticationException,
    AuthorizationException,
    DuplicateAccountException,
    InvalidTokenException,
    LibrisException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "AccountLockedException",
    "AuthenticationException",
    "AuthorizationException",
    "DuplicateAccountException",
    "ErrorKind",
    "InvalidTokenException",
    "LibrisException",
    "ResourceNotFoundException",
    "ValidationException",
]
