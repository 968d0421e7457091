"""Common test fixtures for checkout gateway unit tests."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

from backend.checkout_gateway.app.config import RecaptchaSettings, Settings
from backend.checkout_gateway.app.dependencies import get_http_client, get_settings
from backend.checkout_gateway.app.main import create_app
from backend.checkout_gateway.app.models import VerificationConfig


class FakeOracle:
    """Stand-in for the siteverify endpoint that records every call."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.status_code = 200
        self.body: bytes = json.dumps({"success": True, "score": 0.9}).encode()
        self.delay: float = 0.0
        self.error: Exception | None = None

    def respond(self, payload: Any = None, *, status_code: int = 200, raw: bytes | None = None) -> None:
        self.status_code = status_code
        self.body = raw if raw is not None else json.dumps(payload).encode()

    def fail_with(self, error: Exception) -> None:
        self.error = error

    @property
    def last_form(self) -> dict[str, list[str]]:
        return parse_qs(self.calls[-1].content.decode())

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            content=self.body,
            headers={"content-type": "application/json"},
        )


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest_asyncio.fixture
async def oracle_client(oracle: FakeOracle) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an HTTP client whose requests are answered by ``oracle``."""

    client = httpx.AsyncClient(transport=httpx.MockTransport(oracle.handler))
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def verification_config() -> VerificationConfig:
    return VerificationConfig(site_key="site-key", secret_key="S1", score_threshold=0.5)


@pytest.fixture
def recaptcha_settings() -> RecaptchaSettings:
    return RecaptchaSettings(site_key="site-key", secret_key="S1")


@pytest.fixture
def app_settings(recaptcha_settings: RecaptchaSettings) -> Settings:
    return Settings(ENV="test", recaptcha=recaptcha_settings)


@pytest.fixture
def app(app_settings: Settings, oracle_client: httpx.AsyncClient):
    """Create a FastAPI test application wired to the fake oracle."""

    application = create_app()

    def _override_settings() -> Settings:
        return app_settings

    def _override_http_client() -> httpx.AsyncClient:
        return oracle_client

    application.dependency_overrides[get_settings] = _override_settings
    application.dependency_overrides[get_http_client] = _override_http_client
    return application


@pytest_asyncio.fixture
async def api(app) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client
