"""Domain exceptions for the identity lifecycle.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Every
exception carries an ErrorKind; the lifecycle manager converts them into
Err results and the presentation layer maps kinds to HTTP status codes.
"""

from typing import Any

from libris.domain.enums import ErrorKind


class LibrisException(Exception):
    """Base exception for all application errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
        kind: Failure category used to pick the transport status.
    """

    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        kind: ErrorKind | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
            kind: Optional override of the class-level ErrorKind.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        if kind is not None:
            self.kind = kind
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view: error code, message and details."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LibrisException):
    """Raised when input validation fails (email format, password policy, mismatch)."""

    kind = ErrorKind.BAD_REQUEST

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(LibrisException):
    """Raised when authentication fails (wrong password, unverified email, bad bearer token)."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(LibrisException):
    """Raised when the account may not perform the operation in its current state."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, "PERMISSION_DENIED")


class InvalidTokenException(AuthorizationException):
    """Raised when an emailed verification or reset token is unknown, consumed or expired."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.error_code = "INVALID_OR_EXPIRED_TOKEN"


class AccountLockedException(AuthorizationException):
    """Raised when login is attempted while the account is locked after repeated failures."""

    def __init__(self, locked_until: str) -> None:
        super().__init__(
            "Too many failed login attempts. Your account is temporarily locked; "
            "try again later or reset your password."
        )
        self.error_code = "ACCOUNT_LOCKED"
        self.details = {"locked_until": locked_until}


class DuplicateAccountException(LibrisException):
    """Raised when an email is already registered.

    Same account kind: CONFLICT. Other account kind: FORBIDDEN, because user
    and admin identities are mutually exclusive.
    """

    def __init__(self, message: str, *, other_kind: bool) -> None:
        super().__init__(
            message,
            "ACCOUNT_ALREADY_EXISTS",
            {},
            kind=ErrorKind.FORBIDDEN if other_kind else ErrorKind.CONFLICT,
        )


class ResourceNotFoundException(LibrisException):
    """Raised when a requested account is not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: str, message: str | None = None) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'admin').
            resource_id: The ID or email that was not found.
            message: Optional user-facing message overriding the default.
        """
        super().__init__(
            message or f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
