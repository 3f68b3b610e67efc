"""Response envelope: {timeStamp, success, data, message, status}.

Lifecycle results are mapped to HTTP here and nowhere else. Exception
handlers reuse envelope_response so error bodies have the same shape.
"""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from libris.application.dtos.result import Err, Ok, Result
from libris.domain.enums import ErrorKind
from libris.shared.utils.datetime import isoformat_utc

ERROR_KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


def status_for(result: Result) -> int:
    """HTTP status for a lifecycle result."""
    if isinstance(result, Ok):
        return 201 if result.created else 200
    return ERROR_KIND_STATUS.get(result.kind, 500)


def envelope_response(
    status: int,
    message: str,
    data: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the envelope JSONResponse; success is derived from the status."""
    body = {
        "timeStamp": isoformat_utc(),
        "success": status < 400,
        "data": jsonable_encoder(data or {}),
        "message": message,
        "status": status,
    }
    return JSONResponse(status_code=status, content=body, headers=headers)


def to_envelope(result: Result) -> JSONResponse:
    """Map Ok/Err to the envelope. Err details (field, error code) go under data."""
    status = status_for(result)
    if isinstance(result, Err):
        data: dict[str, Any] = {"error": result.error_code} if result.error_code else {}
        data.update(result.details)
        return envelope_response(status, result.message, data)
    return envelope_response(status, result.message, result.data)
