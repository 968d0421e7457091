"""Typed schema for the reCAPTCHA ``siteverify`` response body."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..models import VerificationOutcome


class InvalidOracleResponse(ValueError):
    """Raised when a siteverify body cannot be decoded into the schema."""


class SiteVerifyResponse(BaseModel):
    """Response schema for ``POST /recaptcha/api/siteverify``."""

    success: bool = False
    score: Optional[float] = Field(default=None, allow_inf_nan=False)
    action: Optional[str] = None
    challenge_ts: Optional[str] = None
    hostname: Optional[str] = None
    error_codes: list[str] = Field(default_factory=list, alias="error-codes")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def parse_body(cls, body: bytes | str) -> "SiteVerifyResponse":
        """Decode ``body`` once, rejecting empty, non-JSON or non-object payloads."""

        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        if not body.strip():
            raise InvalidOracleResponse("siteverify response body is empty")
        try:
            return cls.model_validate_json(body)
        except ValidationError as exc:
            raise InvalidOracleResponse("siteverify response is not a valid payload") from exc

    def to_outcome(self) -> VerificationOutcome:
        return VerificationOutcome(
            success=self.success,
            score=self.score if self.score is not None else 0.0,
            error_codes=frozenset(self.error_codes),
            action=self.action,
            hostname=self.hostname,
        )


__all__ = ["InvalidOracleResponse", "SiteVerifyResponse"]
