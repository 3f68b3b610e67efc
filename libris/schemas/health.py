"""Health check API schemas (carried in the envelope's data)."""

from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    """data for GET /health and GET /health/ready."""

    status: str = Field(default="ok", description="Service status")
    version: str | None = Field(default=None, description="Application version")
    database: str | None = Field(default=None, description="Database reachability (readiness only)")
