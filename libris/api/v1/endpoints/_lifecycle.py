"""Routes shared by every account kind (verify, resend, reset, login, refresh, me, logout).

auth.py and admin_auth.py each add their own signup route and call
add_lifecycle_routes with the kind's manager and session dependencies.
"""

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from libris.api.v1.dependencies import get_bearer_token, get_device_fingerprint
from libris.api.v1.dependencies.device import DeviceFingerprint
from libris.api.v1.envelope import to_envelope
from libris.application.services.identity_service import IdentityLifecycleManager
from libris.core.limiter import limit_auth, limit_credential_email, limit_writes
from libris.infrastructure.security import SessionClaims
from libris.schemas.auth import (
    LoginRequest,
    PasswordResetRequest,
    RefreshRequest,
    ResetPasswordRequest,
)


def add_lifecycle_routes(
    router: APIRouter,
    get_manager: Callable[..., Any],
    require_session: Callable[..., Any],
) -> None:
    """Register the shared lifecycle routes on router."""
    Manager = Annotated[IdentityLifecycleManager, Depends(get_manager)]

    @router.get("/verify/{token}")
    @limit_writes
    async def verify_email(request: Request, token: str, manager: Manager) -> JSONResponse:
        """Consume the emailed verification token."""
        return to_envelope(await manager.verify_email(token))

    @router.get("/resend-verification/{account_id}")
    @limit_credential_email
    async def resend_verification(
        request: Request, account_id: str, manager: Manager
    ) -> JSONResponse:
        """Email a fresh verification link; earlier links stop working."""
        return to_envelope(await manager.resend_verification(account_id))

    @router.post("/request-new-password")
    @limit_credential_email
    async def request_new_password(
        request: Request, body: PasswordResetRequest, manager: Manager
    ) -> JSONResponse:
        return to_envelope(await manager.request_password_reset(body.email))

    @router.put("/reset-password/{token}")
    @limit_auth
    async def reset_password(
        request: Request, token: str, body: ResetPasswordRequest, manager: Manager
    ) -> JSONResponse:
        """Set a new password with the emailed reset token and the current password."""
        return to_envelope(
            await manager.reset_password(
                token,
                body.old_password,
                body.new_password,
                body.confirm_new_password,
            )
        )

    @router.post("/login")
    @limit_auth
    async def login(
        request: Request,
        body: LoginRequest,
        manager: Manager,
        device: Annotated[DeviceFingerprint, Depends(get_device_fingerprint)],
    ) -> JSONResponse:
        """Authenticate with email and password; returns access and refresh tokens."""
        return to_envelope(await manager.login(body.email, body.password, dict(device)))

    @router.post("/refresh")
    @limit_auth
    async def refresh(request: Request, body: RefreshRequest, manager: Manager) -> JSONResponse:
        return to_envelope(await manager.refresh_session(body.refresh_token))

    @router.get("/me")
    async def me(
        manager: Manager,
        session: Annotated[SessionClaims, Depends(require_session)],
    ) -> JSONResponse:
        """Account of the authenticated session. Requires Authorization: Bearer <token>."""
        return to_envelope(await manager.get_account(session.account_id))

    @router.post("/logout")
    async def logout(
        manager: Manager,
        token: Annotated[str | None, Depends(get_bearer_token)],
    ) -> JSONResponse:
        """Acknowledge logout; the token is blocklisted when revocation is enabled."""
        return to_envelope(await manager.logout(token))
