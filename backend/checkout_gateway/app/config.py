"""Centralized application configuration for the checkout gateway."""
from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DEFAULT_VERIFICATION_URL, VerificationConfig


_ROOT_DIR = Path(__file__).resolve().parents[3]
_GATEWAY_DIR = _ROOT_DIR / "backend" / "checkout_gateway"
_DEFAULT_ENV_FILES: tuple[Path, ...] = (
    _ROOT_DIR / ".env",
    _GATEWAY_DIR / ".env",
)


class RecaptchaSettings(BaseModel):
    """reCAPTCHA v3 keys and scoring policy for the checkout form."""

    site_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "RECAPTCHA_SITE_KEY",
            "RECAPTCHA__SITE_KEY",
            "site_key",
        ),
    )
    secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "RECAPTCHA_SECRET_KEY",
            "RECAPTCHA__SECRET_KEY",
            "secret_key",
        ),
    )
    score_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices(
            "RECAPTCHA_SCORE_THRESHOLD",
            "RECAPTCHA__SCORE_THRESHOLD",
            "score_threshold",
        ),
        description="Minimum score required to pass. Lower is less strict.",
    )
    timeout_ms: int = Field(
        default=8000,
        ge=1,
        validation_alias=AliasChoices(
            "RECAPTCHA_TIMEOUT_MS",
            "RECAPTCHA__TIMEOUT_MS",
            "timeout_ms",
        ),
    )
    verification_url: str = Field(
        default=DEFAULT_VERIFICATION_URL,
        validation_alias=AliasChoices(
            "RECAPTCHA_VERIFICATION_URL",
            "RECAPTCHA__VERIFICATION_URL",
            "verification_url",
        ),
    )
    action: str = Field(
        default="checkout",
        validation_alias=AliasChoices(
            "RECAPTCHA_ACTION",
            "RECAPTCHA__ACTION",
            "action",
        ),
        description="Action tag the client-side scorer attaches to tokens.",
    )

    @field_validator("site_key", "secret_key", mode="before")
    @classmethod
    def _clean_optional_strings(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None

    @field_validator("score_threshold", mode="before")
    @classmethod
    def _default_blank_threshold(cls, value: str | float | None) -> str | float:
        if value is None:
            return 0.5
        if isinstance(value, str) and not value.strip():
            return 0.5
        return value

    @field_validator("verification_url", mode="before")
    @classmethod
    def _normalise_verification_url(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("RECAPTCHA_VERIFICATION_URL must be provided")
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("RECAPTCHA_VERIFICATION_URL must be a non-empty string")
        return cleaned

    @field_validator("action", mode="before")
    @classmethod
    def _normalise_action(cls, value: str | None) -> str:
        if value is None:
            return "checkout"
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("RECAPTCHA_ACTION must be a non-empty string")
        return cleaned

    @property
    def configured(self) -> bool:
        """Return ``True`` when both keys are present.

        Checkout verification is skipped entirely otherwise so a half
        configured deployment keeps accepting orders.
        """

        return bool(self.site_key and self.secret_key)

    def to_verification_config(self) -> VerificationConfig:
        """Snapshot the current values into an immutable per-attempt config."""

        return VerificationConfig(
            site_key=self.site_key or "",
            secret_key=self.secret_key or "",
            score_threshold=self.score_threshold,
            timeout_ms=self.timeout_ms,
            verification_url=self.verification_url,
        )


class Settings(BaseSettings):
    """Top level checkout gateway configuration."""

    env: str = Field(default="dev", validation_alias=AliasChoices("ENV", "APP_ENV"))
    recaptcha: RecaptchaSettings = Field(default_factory=RecaptchaSettings)

    model_config = SettingsConfigDict(
        env_file=_DEFAULT_ENV_FILES,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def recaptcha_configured(self) -> bool:
        return self.recaptcha.configured


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""

    return settings


__all__ = ["RecaptchaSettings", "Settings", "get_settings", "settings"]
