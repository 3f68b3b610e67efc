"""Composition root: lifecycle managers, session issuer and authenticated session.

Routes depend only on these; repositories, the notifier and the token issuer
are built here from infrastructure implementations.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from libris.application.interfaces.services import INotifier, IRevocationStore
from libris.application.services.account_kinds import (
    ADMIN_KIND,
    USER_KIND,
    AccountKind,
    other_kind,
)
from libris.application.services.identity_service import IdentityLifecycleManager
from libris.core.config import get_settings
from libris.domain.enums import AccountKindName
from libris.domain.exceptions import AuthenticationException, AuthorizationException
from libris.infrastructure.external.email import DeferredNotifier
from libris.infrastructure.persistence.database import get_db_transactional
from libris.infrastructure.persistence.models import Admin, User
from libris.infrastructure.persistence.repositories import AccountRepository
from libris.infrastructure.security import (
    SessionClaims,
    SessionTokenIssuer,
    TokenType,
    get_password_hash,
    verify_password,
)

_MODELS: dict[AccountKindName, type[User] | type[Admin]] = {
    AccountKindName.USER: User,
    AccountKindName.ADMIN: Admin,
}

_http_bearer = HTTPBearer(auto_error=False)


def get_notifier(request: Request) -> INotifier:
    """Process-wide notifier created in the lifespan."""
    return request.app.state.notifier


async def get_request_notifier(
    notifier: Annotated[INotifier, Depends(get_notifier)],
) -> AsyncIterator[DeferredNotifier]:
    """Hold the request's emails; send them after the request transaction commits.

    Manager factories declare it before the session dependency, so it is
    torn down after the commit and sees a failed commit as an exception.
    """
    outbox = DeferredNotifier(notifier)
    try:
        yield outbox
    except Exception:
        outbox.discard()
        raise
    outbox.release()


def get_revocation_store(request: Request) -> IRevocationStore | None:
    """Revocation store, or None when session revocation is disabled."""
    return getattr(request.app.state, "revocation_store", None)


def get_session_issuer() -> SessionTokenIssuer:
    return SessionTokenIssuer()


def build_identity_manager(
    kind: AccountKind,
    db: AsyncSession,
    notifier: INotifier,
    session_issuer: SessionTokenIssuer,
    revocation_store: IRevocationStore | None = None,
) -> IdentityLifecycleManager:
    """Wire a lifecycle manager for kind on one request session."""
    return IdentityLifecycleManager(
        kind=kind,
        accounts=AccountRepository(db, _MODELS[kind.name]),
        other_accounts=AccountRepository(db, _MODELS[other_kind(kind).name]),
        notifier=notifier,
        session_issuer=session_issuer,
        hash_password=get_password_hash,
        check_password=verify_password,
        settings=get_settings(),
        revocation_store=revocation_store,
    )


async def get_user_identity_manager(
    notifier: Annotated[INotifier, Depends(get_request_notifier)],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    session_issuer: Annotated[SessionTokenIssuer, Depends(get_session_issuer)],
    revocation_store: Annotated[IRevocationStore | None, Depends(get_revocation_store)],
) -> IdentityLifecycleManager:
    return build_identity_manager(USER_KIND, db, notifier, session_issuer, revocation_store)


async def get_admin_identity_manager(
    notifier: Annotated[INotifier, Depends(get_request_notifier)],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    session_issuer: Annotated[SessionTokenIssuer, Depends(get_session_issuer)],
    revocation_store: Annotated[IRevocationStore | None, Depends(get_revocation_store)],
) -> IdentityLifecycleManager:
    return build_identity_manager(ADMIN_KIND, db, notifier, session_issuer, revocation_store)


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> str | None:
    """Raw bearer token from the Authorization header, or None."""
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


def require_session(kind_name: AccountKindName):
    """Dependency factory: valid, unrevoked access token for kind_name.

    Attaches the claims to request.state.session_user.
    """

    async def _require(
        request: Request,
        token: Annotated[str | None, Depends(get_bearer_token)],
        session_issuer: Annotated[SessionTokenIssuer, Depends(get_session_issuer)],
        revocation_store: Annotated[IRevocationStore | None, Depends(get_revocation_store)],
    ) -> SessionClaims:
        if not token:
            raise AuthenticationException("Please login first.")
        claims = session_issuer.validate(token, expected_type=TokenType.ACCESS)
        if revocation_store is not None and await revocation_store.is_revoked(claims.session_id):
            raise AuthenticationException("Session has been revoked. Please log in again.")
        if claims.account_kind != kind_name.value:
            raise AuthorizationException("This session cannot access this resource.")
        request.state.session_user = claims
        return claims

    return _require


require_user_session = require_session(AccountKindName.USER)
require_admin_session = require_session(AccountKindName.ADMIN)
