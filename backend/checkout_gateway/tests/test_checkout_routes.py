"""Tests for the checkout verification HTTP endpoints."""
from __future__ import annotations

import io
import json
import logging
import sys

import httpx
import pytest
import structlog
from fastapi import status

from backend.checkout_gateway.app import captcha as captcha_module
from backend.checkout_gateway.app import logging as logging_config
from backend.checkout_gateway.app.config import RecaptchaSettings
from backend.checkout_gateway.app.guard import (
    NOT_HUMAN_NOTICE,
    REQUEST_FAILED_NOTICE,
    VERIFICATION_FAILED_NOTICE,
)


@pytest.mark.asyncio
async def test_checkout_accepted_for_human_score(api, oracle):
    oracle.respond({"success": True, "score": 0.9})

    response = await api.post(
        "/checkout/verify",
        json={"g-recaptcha-response": "abc", "billing_email": "buyer@example.com"},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "accepted", "bypassed": False}
    assert oracle.last_form["secret"] == ["S1"]
    assert oracle.last_form["response"] == ["abc"]


@pytest.mark.asyncio
async def test_checkout_blocked_for_low_score(api, oracle):
    oracle.respond({"success": True, "score": 0.2})

    response = await api.post("/checkout/verify", json={"g-recaptcha-response": "abc"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == {"notices": [NOT_HUMAN_NOTICE]}


@pytest.mark.asyncio
async def test_checkout_without_token_never_calls_oracle(api, oracle):
    response = await api.post("/checkout/verify", json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == {"notices": [VERIFICATION_FAILED_NOTICE]}
    assert oracle.calls == []


@pytest.mark.asyncio
async def test_checkout_rejected_by_oracle(api, oracle):
    oracle.respond({"success": False, "error-codes": ["timeout-or-duplicate"]})

    response = await api.post("/checkout/verify", json={"g-recaptcha-response": "used"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    detail = response.json()["detail"]
    assert detail == {"notices": [VERIFICATION_FAILED_NOTICE]}
    assert "timeout-or-duplicate" not in response.text


@pytest.mark.asyncio
async def test_checkout_blocked_when_oracle_unreachable(api, oracle):
    oracle.fail_with(httpx.ConnectTimeout("connect timeout"))

    response = await api.post("/checkout/verify", json={"g-recaptcha-response": "abc"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == {"notices": [REQUEST_FAILED_NOTICE]}


@pytest.mark.asyncio
async def test_oracle_error_page_blocks_with_generic_notice(api, oracle):
    oracle.respond(raw=b"<html>error</html>", status_code=500)

    response = await api.post("/checkout/verify", json={"g-recaptcha-response": "abc"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == {"notices": [VERIFICATION_FAILED_NOTICE]}


@pytest.mark.asyncio
async def test_forwarded_client_ip_is_sent_to_oracle(api, oracle):
    await api.post(
        "/checkout/verify",
        json={"g-recaptcha-response": "abc"},
        headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    )

    assert oracle.last_form["remoteip"] == ["203.0.113.9"]


@pytest.mark.asyncio
@pytest.mark.parametrize("recaptcha_settings", [RecaptchaSettings(site_key="site-key")])
async def test_checkout_bypassed_when_not_configured(api, oracle, recaptcha_settings):
    response = await api.post("/checkout/verify", json={})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "accepted", "bypassed": True}
    assert oracle.calls == []


@pytest.mark.asyncio
async def test_recaptcha_config_exposes_public_values_only(api):
    response = await api.get("/checkout/recaptcha/config")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body == {
        "enabled": True,
        "siteKey": "site-key",
        "action": "checkout",
        "scriptUrl": "https://www.google.com/recaptcha/api.js?render=site-key",
    }
    assert "S1" not in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize("recaptcha_settings", [RecaptchaSettings(secret_key="S1")])
async def test_recaptcha_config_disabled_without_site_key(api, recaptcha_settings):
    response = await api.get("/checkout/recaptcha/config")

    body = response.json()
    assert body["enabled"] is False
    assert body["siteKey"] is None
    assert body["scriptUrl"] is None


@pytest.mark.asyncio
async def test_widget_renders_html_snippet(api):
    response = await api.get("/checkout/recaptcha/widget")

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/html")
    assert 'name="g-recaptcha-response"' in response.text
    assert "render=site-key" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize("recaptcha_settings", [RecaptchaSettings(site_key="site-key")])
async def test_widget_empty_when_secret_missing(api, recaptcha_settings):
    response = await api.get("/checkout/recaptcha/widget")

    assert response.status_code == status.HTTP_200_OK
    assert response.text == ""


@pytest.mark.asyncio
async def test_health_reports_configuration(api):
    response = await api.get("/system/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "env": "test", "recaptchaConfigured": True}


@pytest.mark.asyncio
async def test_routes_mount_under_prefix(app_settings, oracle_client):
    from backend.checkout_gateway.app.dependencies import get_http_client, get_settings
    from backend.checkout_gateway.app.main import create_app

    application = create_app(api_prefix="api/")
    application.dependency_overrides[get_settings] = lambda: app_settings
    application.dependency_overrides[get_http_client] = lambda: oracle_client

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=application),
        base_url="http://testserver",
    ) as client:
        response = await client.get("/api/system/health")

    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_verification_log_carries_request_context(api, oracle, monkeypatch):
    oracle.respond({"success": True, "score": 0.9})
    buffer = io.StringIO()
    original_stdout = sys.stdout
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    sys.stdout = buffer
    try:
        logging_config.setup_logging(level="INFO")
        monkeypatch.setattr(
            captcha_module, "logger", logging_config.get_logger("checkout_gateway.captcha")
        )
        response = await api.post(
            "/checkout/verify",
            json={"g-recaptcha-response": "abc"},
            headers={"X-Request-ID": "req-42", "X-Forwarded-For": "203.0.113.9"},
        )
    finally:
        sys.stdout = original_stdout
        root.handlers = original_handlers
        logging_config.setup_logging(level="INFO")

    assert response.status_code == status.HTTP_200_OK
    events = [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]
    verification = next(event for event in events if event["event"] == "captcha_verification")
    assert verification["request_id"] == "req-42"
    assert verification["remote_ip"] == "203.0.113.9"
    assert "abc" not in buffer.getvalue()
    assert structlog.contextvars.get_contextvars() == {}
