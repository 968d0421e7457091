"""Pydantic models for the checkout verification endpoints."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..rendering import TOKEN_FIELD_NAME


class CheckoutSubmission(BaseModel):
    """Checkout form payload; only the reCAPTCHA token is inspected."""

    recaptcha_token: Optional[str] = Field(default=None, alias=TOKEN_FIELD_NAME)

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CheckoutAccepted(BaseModel):
    """Response schema for a checkout submission that may proceed."""

    status: Literal["accepted"] = "accepted"
    bypassed: bool = False


class RecaptchaClientConfig(BaseModel):
    """Response schema for ``GET /checkout/recaptcha/config``."""

    enabled: bool
    site_key: Optional[str] = Field(default=None, serialization_alias="siteKey")
    action: str
    script_url: Optional[str] = Field(default=None, serialization_alias="scriptUrl")

    model_config = ConfigDict(populate_by_name=True)


__all__ = ["CheckoutAccepted", "CheckoutSubmission", "RecaptchaClientConfig"]
