"""Request and response schemas (pydantic)."""

from libris.schemas.auth import (
    AdminCreateRequest,
    LoginRequest,
    PasswordResetRequest,
    RefreshRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from libris.schemas.health import HealthStatus

__all__ = [
    "AdminCreateRequest",
    "HealthStatus",
    "LoginRequest",
    "PasswordResetRequest",
    "RefreshRequest",
    "ResetPasswordRequest",
    "SignupRequest",
]
