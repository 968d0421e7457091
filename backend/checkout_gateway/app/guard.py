"""Checkout-side policy wrapped around the verification service."""
from __future__ import annotations

from dataclasses import dataclass

import httpx

from .captcha import verify
from .config import RecaptchaSettings
from .logging import get_logger
from .models import Decision, DenyReason, VerificationRequest


logger = get_logger("checkout_gateway.guard")

VERIFICATION_FAILED_NOTICE = "reCAPTCHA verification failed. Please try again."
REQUEST_FAILED_NOTICE = "reCAPTCHA request failed. Please try again."
NOT_HUMAN_NOTICE = "We could not verify that you are human. Please try again."

_NOTICES: dict[DenyReason, str] = {
    DenyReason.MISSING_TOKEN: VERIFICATION_FAILED_NOTICE,
    DenyReason.ORACLE_REJECTED: VERIFICATION_FAILED_NOTICE,
    DenyReason.ORACLE_UNREACHABLE: REQUEST_FAILED_NOTICE,
    DenyReason.SCORE_BELOW_THRESHOLD: NOT_HUMAN_NOTICE,
}


def notice_for(reason: DenyReason) -> str:
    """Return the shopper-facing message for ``reason``."""

    return _NOTICES[reason]


@dataclass(frozen=True, slots=True)
class CheckoutVerdict:
    """Whether a checkout submission may create an order."""

    permitted: bool
    bypassed: bool = False
    decision: Decision | None = None
    notice: str | None = None


class CheckoutGuard:
    """Gate checkout submissions on a reCAPTCHA v3 decision."""

    def __init__(
        self,
        settings: RecaptchaSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = client

    @property
    def enabled(self) -> bool:
        """Return ``True`` when both reCAPTCHA keys are configured."""

        return self._settings.configured

    async def check(self, token: str | None, remote_ip: str | None = None) -> CheckoutVerdict:
        """Verify ``token`` unless the keys are missing, in which case checkout proceeds."""

        if not self.enabled:
            logger.info("captcha_verification_skipped", reason="not_configured")
            return CheckoutVerdict(permitted=True, bypassed=True)

        config = self._settings.to_verification_config()
        decision = await verify(
            config,
            VerificationRequest(token=token, remote_ip=remote_ip),
            client=self._client,
        )
        if decision.allowed:
            return CheckoutVerdict(permitted=True, decision=decision)
        reason = decision.reason or DenyReason.ORACLE_REJECTED
        return CheckoutVerdict(
            permitted=False,
            decision=decision,
            notice=notice_for(reason),
        )


__all__ = [
    "CheckoutGuard",
    "CheckoutVerdict",
    "NOT_HUMAN_NOTICE",
    "REQUEST_FAILED_NOTICE",
    "VERIFICATION_FAILED_NOTICE",
    "notice_for",
]
