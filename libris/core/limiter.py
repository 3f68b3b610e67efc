"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. create_app() switches it on or off from
settings.rate_limit_enabled.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Single source of truth for rate limit strings and decorators.
LOGIN_LIMIT = "10/minute"
CREDENTIAL_EMAIL_LIMIT = "5/minute"
WRITE_ENDPOINT_LIMIT = "60/minute"

limit_auth = limiter.limit(LOGIN_LIMIT)
# Endpoints that send an email (signup, resend verification, reset request)
limit_credential_email = limiter.limit(CREDENTIAL_EMAIL_LIMIT)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
