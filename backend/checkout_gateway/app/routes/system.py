"""API routes exposing system level information."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..config import Settings
from ..dependencies import get_settings
from ..schemas.system import HealthStatusResponse


router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health", response_model=HealthStatusResponse, response_model_by_alias=True)
def get_health_status(settings: Settings = Depends(get_settings)) -> HealthStatusResponse:
    """Return liveness plus whether checkout verification is active."""

    return HealthStatusResponse(
        status="ok",
        env=settings.env,
        recaptcha_configured=settings.recaptcha_configured,
    )
