"""Application services: token generation, credential policy, identity lifecycle.

identity_service and account_kinds are imported from their modules directly
(they depend on the ports package, which depends on token_service).
"""

from libris.application.services.credential_policy import (
    normalize_email,
    validate_email_address,
    validate_password_confirmation,
    validate_password_strength,
)
from libris.application.services.token_service import (
    IssuedToken,
    VerificationTokenGenerator,
)

__all__ = [
    "IssuedToken",
    "VerificationTokenGenerator",
    "normalize_email",
    "validate_email_address",
    "validate_password_confirmation",
    "validate_password_strength",
]
