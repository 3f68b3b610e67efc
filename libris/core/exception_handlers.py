"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Every error leaves the app in
the same envelope as lifecycle results ({timeStamp, success, data, message,
status}); request validation failures are 400, not FastAPI's default 422.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from libris.api.v1.envelope import ERROR_KIND_STATUS, envelope_response
from libris.core.config import get_settings
from libris.domain.exceptions import LibrisException

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = ("body", "path", "query", "header")


def _libris_exception_handler(request: Request, exc: LibrisException) -> JSONResponse:
    """Envelope from the exception's kind, error code and details."""
    status = ERROR_KIND_STATUS.get(exc.kind, 400)
    return envelope_response(status, exc.message, {"error": exc.error_code, **exc.details})


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 400 with the failing fields; the message names the first one."""
    errors: list[dict[str, Any]] = [
        {
            "field": ".".join(
                str(p) for p in err.get("loc", ()) if p not in _LOCATION_PREFIXES
            ),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    message = "Request validation failed"
    if errors and errors[0]["field"]:
        message = f"{errors[0]['field']}: {errors[0]['message']}"
    return envelope_response(400, message, {"error": "VALIDATION_ERROR", "errors": errors})


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Envelope for Starlette HTTP exceptions (status + detail)."""
    return envelope_response(
        exc.status_code,
        str(exc.detail),
        {"error": "HTTP_ERROR"},
        headers=getattr(exc, "headers", None),
    )


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 envelope naming the exceeded limit."""
    return envelope_response(
        429,
        f"Too many requests: {exc.detail}. Please try again later.",
        {"error": "RATE_LIMITED"},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    message = str(exc) if settings.debug else "Internal server error"
    return envelope_response(500, message, {"error": "INTERNAL_ERROR"})


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: LibrisException (and
    subclasses), RequestValidationError, StarletteHTTPException,
    RateLimitExceeded, generic Exception.
    """
    app.add_exception_handler(LibrisException, _libris_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
