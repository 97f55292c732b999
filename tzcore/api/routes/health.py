# tzcore/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tzcore.core.config import get_settings


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the health check endpoint.
    """

    status: str = Field(..., description="Overall health status of the service.", examples=["ok"])
    app_name: str = Field(..., examples=["Timezone Scheduling Core"])
    environment: str = Field(..., description="Deployment environment (local/dev/stage/prod).", examples=["local"])
    default_zone: str = Field(..., description="Zone used when a request omits one.", examples=["UTC"])
    timestamp_utc: datetime = Field(..., examples=["2025-01-01T10:30:00Z"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness probe. Does not touch the zone database or any configuration file.",
)
async def health_check() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        default_zone=settings.DEFAULT_ZONE,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
