"""
Health check endpoints.
Simple endpoints for monitoring application health and status.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chat_relay import __version__
from chat_relay.config.settings import Settings, get_settings

router = APIRouter(tags=["health"])


class UpstreamStatus(BaseModel):
    """Upstream provider configuration summary."""

    api: str
    model: str
    credential_configured: bool


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: str
    environment: str
    upstream: UpstreamStatus


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check endpoint. Never contacts the provider."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        upstream=UpstreamStatus(
            api=settings.upstream_api,
            model=settings.openai_model,
            credential_configured=settings.has_api_key,
        ),
    )
