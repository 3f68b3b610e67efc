"""Admin auth API under /auth/admin.

Admins are created without a password. Verifying the email issues a
temporary password and a reset link; the admin must reset before logging in.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from libris.api.v1.dependencies import (
    get_admin_identity_manager,
    get_bearer_token,
    get_session_issuer,
    require_admin_session,
)
from libris.api.v1.endpoints._lifecycle import add_lifecycle_routes
from libris.api.v1.envelope import to_envelope
from libris.application.services.identity_service import IdentityLifecycleManager
from libris.core.limiter import limit_credential_email
from libris.domain.enums import AccountKindName
from libris.domain.exceptions import AuthenticationException
from libris.infrastructure.security import SessionTokenIssuer
from libris.schemas.auth import AdminCreateRequest

router = APIRouter()


@router.post("", status_code=201)
@limit_credential_email
async def create_admin(
    request: Request,
    body: AdminCreateRequest,
    manager: Annotated[IdentityLifecycleManager, Depends(get_admin_identity_manager)],
    session_issuer: Annotated[SessionTokenIssuer, Depends(get_session_issuer)],
    token: Annotated[str | None, Depends(get_bearer_token)],
) -> JSONResponse:
    """Create an admin; a verification link is emailed.

    When called with an admin session, the caller is recorded as created_by.
    """
    created_by: str | None = None
    if token:
        try:
            claims = session_issuer.validate(token)
        except AuthenticationException:
            claims = None
        if claims is not None and claims.account_kind == AccountKindName.ADMIN.value:
            created_by = claims.account_id
    return to_envelope(await manager.signup(body.model_dump(), created_by=created_by))


add_lifecycle_routes(router, get_admin_identity_manager, require_admin_session)
