"""User auth API: signup plus the shared lifecycle routes under /auth."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from libris.api.v1.dependencies import get_user_identity_manager, require_user_session
from libris.api.v1.endpoints._lifecycle import add_lifecycle_routes
from libris.api.v1.envelope import to_envelope
from libris.application.services.identity_service import IdentityLifecycleManager
from libris.core.limiter import limit_credential_email
from libris.schemas.auth import SignupRequest

router = APIRouter()


@router.post("/signup", status_code=201)
@limit_credential_email
async def signup(
    request: Request,
    body: SignupRequest,
    manager: Annotated[IdentityLifecycleManager, Depends(get_user_identity_manager)],
) -> JSONResponse:
    """Register a user; a verification link is emailed. Returns 201 with the new account."""
    return to_envelope(await manager.signup(body.model_dump()))


add_lifecycle_routes(router, get_user_identity_manager, require_user_session)
