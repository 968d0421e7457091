"""Checkout submission gate and client-side widget endpoints."""

from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from ..config import Settings
from ..dependencies import extract_client_ip, get_checkout_guard, get_settings
from ..guard import CheckoutGuard
from ..logging import bind_contextvars, clear_contextvars, get_logger
from ..rendering import render_widget, script_url
from ..schemas.checkout import CheckoutAccepted, CheckoutSubmission, RecaptchaClientConfig


router = APIRouter(prefix="/checkout", tags=["checkout"])

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger("checkout_gateway.routes.checkout")


@router.post("/verify", response_model=CheckoutAccepted)
async def verify_checkout(
    payload: CheckoutSubmission,
    request: Request,
    guard: CheckoutGuard = Depends(get_checkout_guard),
) -> CheckoutAccepted:
    """Allow the order through or block it with a generic notice."""

    client_ip = extract_client_ip(request)
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    bind_contextvars(request_id=request_id, remote_ip=client_ip)
    try:
        verdict = await guard.check(payload.recaptcha_token, client_ip)
        if not verdict.permitted:
            reason = verdict.decision.reason if verdict.decision else None
            logger.info("checkout_blocked", reason=reason.value if reason else None)
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                detail={"notices": [verdict.notice]},
            )
        return CheckoutAccepted(bypassed=verdict.bypassed)
    finally:
        clear_contextvars()


@router.get(
    "/recaptcha/config",
    response_model=RecaptchaClientConfig,
    response_model_by_alias=True,
)
def get_recaptcha_config(
    settings: Settings = Depends(get_settings),
) -> RecaptchaClientConfig:
    """Expose the public half of the configuration to single-page frontends."""

    recaptcha = settings.recaptcha
    if not recaptcha.configured:
        return RecaptchaClientConfig(enabled=False, action=recaptcha.action)
    return RecaptchaClientConfig(
        enabled=True,
        site_key=recaptcha.site_key,
        action=recaptcha.action,
        script_url=script_url(recaptcha.site_key or ""),
    )


@router.get("/recaptcha/widget", response_class=HTMLResponse)
def get_recaptcha_widget(settings: Settings = Depends(get_settings)) -> HTMLResponse:
    """Return the snippet to embed in the checkout form, empty when unconfigured."""

    recaptcha = settings.recaptcha
    if not recaptcha.configured:
        return HTMLResponse("")
    return HTMLResponse(render_widget(recaptcha.site_key, recaptcha.action))
