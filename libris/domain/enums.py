"""Domain enumerations for the identity lifecycle."""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ErrorKind(_ValuesMixin, str, Enum):
    """Failure category of a lifecycle operation.

    Transport-neutral; the HTTP boundary maps each kind to one status code.
    """

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class AccountKindName(_ValuesMixin, str, Enum):
    """The two mutually exclusive account variants."""

    USER = "user"
    ADMIN = "admin"


class SessionTokenType(_ValuesMixin, str, Enum):
    """Session token horizon: short-lived access or long-lived refresh."""

    ACCESS = "access"
    REFRESH = "refresh"
