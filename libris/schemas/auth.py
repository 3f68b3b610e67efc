"""Auth API request schemas.

Field names follow the wire format (camelCase); Python names are snake_case
and accepted too. Email and password policy is enforced by the lifecycle
manager, not here, so policy failures carry their specific messages.
"""

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignupRequest(_Body):
    """Request body for user signup."""

    name: str | None = Field(None, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    mobile: str | None = Field(None, max_length=32)
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1, alias="confirmPassword")


class AdminCreateRequest(_Body):
    """Request body for admin creation. No password: one is issued on verification."""

    name: str | None = Field(None, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    mobile: str | None = Field(None, max_length=32)
    designation: str | None = Field(None, max_length=120)
    permissions: list[str] = Field(default_factory=list)


class LoginRequest(_Body):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)


class PasswordResetRequest(_Body):
    """Request body for POST /request-new-password."""

    email: str = Field(..., min_length=3, max_length=254)


class ResetPasswordRequest(_Body):
    """Request body for PUT /reset-password/{token}. old_password is the current or temporary password."""

    old_password: str = Field(..., min_length=1, alias="oldPassword")
    new_password: str = Field(..., min_length=1, alias="newPassword")
    confirm_new_password: str = Field(..., min_length=1, alias="confirmNewPassword")


class RefreshRequest(_Body):
    refresh_token: str = Field(..., min_length=1, alias="refreshToken")
