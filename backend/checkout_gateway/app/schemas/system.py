"""Pydantic models for system status endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthStatusResponse(BaseModel):
    """Response schema for ``GET /system/health``."""

    status: str
    env: str
    recaptcha_configured: bool = Field(serialization_alias="recaptchaConfigured")

    model_config = ConfigDict(populate_by_name=True)
