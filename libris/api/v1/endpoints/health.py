"""Health check endpoints for liveness and readiness checks."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from libris.api.v1.envelope import envelope_response
from libris.core.config import get_settings
from libris.infrastructure.persistence.database import get_db
from libris.schemas.health import HealthStatus
from libris.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("")
def health_check() -> JSONResponse:
    """Return ok status for liveness. No dependencies."""
    status = HealthStatus(version=get_settings().app_version)
    return envelope_response(200, "Service is healthy.", status.model_dump(exclude_none=True))


@router.get("/ready")
async def readiness_check(db: Annotated[AsyncSession, Depends(get_db)]) -> JSONResponse:
    """Return 200 when the database answers; 503 otherwise."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Readiness check: database unreachable")
        status = HealthStatus(status="not_ready", database="unreachable")
        return envelope_response(503, "Service is not ready.", status.model_dump(exclude_none=True))
    status = HealthStatus(version=get_settings().app_version, database="ok")
    return envelope_response(200, "Service is ready.", status.model_dump(exclude_none=True))
