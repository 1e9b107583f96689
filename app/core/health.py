"""Health check endpoint."""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["ok"]
    app_name: str
    app_env: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe.

    The trend engine has no external dependencies, so liveness and
    readiness are the same check.
    """
    settings = get_settings()
    logger.debug("health.check_started")
    return HealthResponse(status="ok", app_name=settings.app_name, app_env=settings.app_env)
