"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for lifecycle managers, the device fingerprint
and the authenticated session. Routes depend only on these, not on
infrastructure directly.
"""

from libris.api.v1.dependencies.composition import (
    build_identity_manager,
    get_admin_identity_manager,
    get_bearer_token,
    get_notifier,
    get_request_notifier,
    get_revocation_store,
    get_session_issuer,
    get_user_identity_manager,
    require_admin_session,
    require_session,
    require_user_session,
)
from libris.api.v1.dependencies.device import (
    DeviceFingerprint,
    fingerprint_from_headers,
    get_device_fingerprint,
)

__all__ = [
    "DeviceFingerprint",
    "build_identity_manager",
    "fingerprint_from_headers",
    "get_admin_identity_manager",
    "get_bearer_token",
    "get_device_fingerprint",
    "get_notifier",
    "get_request_notifier",
    "get_revocation_store",
    "get_session_issuer",
    "get_user_identity_manager",
    "require_admin_session",
    "require_session",
    "require_user_session",
]
