"""Request context management using contextvars.

Async-safe storage for request-scoped values. The request ID is set by
RequestIDMiddleware and read by the logging filter so every log line
emitted while serving a request carries it.
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token[str | None]:
    """Bind request_id to the current task context; returns a token for reset_request_id."""
    return _request_id.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id.reset(token)


def get_request_id() -> str | None:
    """Return the request ID for the current context, or None outside a request."""
    return _request_id.get()
