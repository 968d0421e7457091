"""Server-side verification of reCAPTCHA v3 checkout tokens."""
from __future__ import annotations

import asyncio
from typing import Any

import httpx

from .logging import get_logger
from .models import (
    Decision,
    DenyReason,
    VerificationConfig,
    VerificationOutcome,
    VerificationRequest,
)
from .schemas.siteverify import InvalidOracleResponse, SiteVerifyResponse


logger = get_logger("checkout_gateway.captcha")


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _build_payload(config: VerificationConfig, token: str, remote_ip: str | None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "secret": config.secret_key,
        "response": token,
    }
    cleaned_ip = _clean(remote_ip)
    if cleaned_ip:
        payload["remoteip"] = cleaned_ip
    return payload


async def _post(
    config: VerificationConfig,
    payload: dict[str, Any],
    client: httpx.AsyncClient | None,
) -> httpx.Response:
    timeout = config.timeout_seconds
    if client is not None:
        return await client.post(config.verification_url, data=payload, timeout=timeout)
    async with httpx.AsyncClient(timeout=timeout) as own_client:
        return await own_client.post(config.verification_url, data=payload)


def _log_decision(decision: Decision, request: VerificationRequest) -> None:
    outcome = decision.outcome
    fields: dict[str, Any] = {
        "allowed": decision.allowed,
        "reason": decision.reason.value if decision.reason else None,
        "remote_ip": request.remote_ip,
    }
    if outcome is not None:
        fields.update(
            score=outcome.score,
            error_codes=sorted(outcome.error_codes),
            action=outcome.action,
            hostname=outcome.hostname,
        )
    if decision.allowed:
        logger.info("captcha_verification", **fields)
    else:
        logger.warning("captcha_verification", **fields)


async def _evaluate(
    config: VerificationConfig,
    request: VerificationRequest,
    client: httpx.AsyncClient | None,
) -> Decision:
    token = _clean(request.token)
    if not token:
        return Decision.deny(DenyReason.MISSING_TOKEN)

    payload = _build_payload(config, token, request.remote_ip)
    try:
        response = await asyncio.wait_for(
            _post(config, payload, client),
            timeout=config.timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "captcha_oracle_timeout",
            timeout_ms=config.timeout_ms,
        )
        return Decision.deny(DenyReason.ORACLE_UNREACHABLE)
    except httpx.HTTPError as exc:
        logger.warning(
            "captcha_oracle_request_failed",
            error=type(exc).__name__,
            detail=str(exc),
        )
        return Decision.deny(DenyReason.ORACLE_UNREACHABLE)

    try:
        body = SiteVerifyResponse.parse_body(response.content)
    except InvalidOracleResponse as exc:
        logger.warning(
            "captcha_oracle_response_invalid",
            status_code=response.status_code,
            detail=str(exc),
        )
        return Decision.deny(DenyReason.ORACLE_REJECTED)

    outcome = body.to_outcome()
    if not outcome.success:
        return Decision.deny(DenyReason.ORACLE_REJECTED, outcome)
    if not outcome.score >= config.score_threshold:
        return Decision.deny(DenyReason.SCORE_BELOW_THRESHOLD, outcome)
    return Decision.allow(outcome)


async def verify(
    config: VerificationConfig,
    request: VerificationRequest,
    *,
    client: httpx.AsyncClient | None = None,
) -> Decision:
    """Decide whether ``request`` carries a token from a likely human.

    Issues at most one ``POST`` to ``config.verification_url``; an empty token
    is denied without contacting the oracle.  Transport failures and timeouts
    deny with ``ORACLE_UNREACHABLE``.  A received reply is judged by its body
    whatever its HTTP status: undecodable bodies and ``success: false`` deny
    with ``ORACLE_REJECTED``, as does a score that is not a finite number; a
    score under ``config.score_threshold`` denies with
    ``SCORE_BELOW_THRESHOLD``.

    ``client`` may be a shared :class:`httpx.AsyncClient`; when omitted a
    client is opened for this call only.  Nothing is retried or cached, so
    concurrent calls for unrelated requests need no coordination.
    """

    try:
        decision = await _evaluate(config, request, client)
    except asyncio.CancelledError:
        logger.warning(
            "captcha_verification_cancelled",
            reason=DenyReason.ORACLE_UNREACHABLE.value,
            remote_ip=request.remote_ip,
        )
        raise
    _log_decision(decision, request)
    return decision


__all__ = ["verify"]
