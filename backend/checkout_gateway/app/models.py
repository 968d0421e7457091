"""Value types exchanged with the reCAPTCHA verification service."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_VERIFICATION_URL = "https://www.google.com/recaptcha/api/siteverify"


class VerificationConfig(BaseModel):
    """Immutable credentials and policy for a single verification attempt."""

    site_key: str
    secret_key: str
    score_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    timeout_ms: int = Field(default=8000, ge=1)
    verification_url: str = DEFAULT_VERIFICATION_URL

    model_config = ConfigDict(frozen=True)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass(frozen=True, slots=True)
class VerificationRequest:
    """Token submitted with a checkout attempt and where it came from."""

    token: str | None
    remote_ip: str | None = None


@dataclass(frozen=True, slots=True)
class VerificationOutcome:
    """What the oracle said about a token."""

    success: bool
    score: float = 0.0
    error_codes: frozenset[str] = field(default_factory=frozenset)
    action: str | None = None
    hostname: str | None = None


class DenyReason(str, Enum):
    """Why a checkout attempt was refused."""

    MISSING_TOKEN = "missing_token"
    ORACLE_UNREACHABLE = "oracle_unreachable"
    ORACLE_REJECTED = "oracle_rejected"
    SCORE_BELOW_THRESHOLD = "score_below_threshold"


@dataclass(frozen=True, slots=True)
class Decision:
    """Allow/deny verdict produced by :func:`~.captcha.verify`.

    ``reason`` is ``None`` exactly when ``allowed`` is ``True``.  ``outcome``
    is populated whenever the oracle returned a decodable response.
    """

    allowed: bool
    reason: DenyReason | None = None
    outcome: VerificationOutcome | None = None

    def __post_init__(self) -> None:
        if self.allowed and self.reason is not None:
            raise ValueError("an allowed decision cannot carry a deny reason")
        if not self.allowed and self.reason is None:
            raise ValueError("a denied decision requires a reason")

    @classmethod
    def allow(cls, outcome: VerificationOutcome | None = None) -> "Decision":
        return cls(allowed=True, outcome=outcome)

    @classmethod
    def deny(
        cls,
        reason: DenyReason,
        outcome: VerificationOutcome | None = None,
    ) -> "Decision":
        return cls(allowed=False, reason=reason, outcome=outcome)

    @property
    def error_codes(self) -> frozenset[str]:
        if self.outcome is None:
            return frozenset()
        return self.outcome.error_codes


__all__ = [
    "DEFAULT_VERIFICATION_URL",
    "Decision",
    "DenyReason",
    "VerificationConfig",
    "VerificationOutcome",
    "VerificationRequest",
]
