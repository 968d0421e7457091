"""Common FastAPI dependency helpers."""
from __future__ import annotations

import httpx
from fastapi import Depends, Request

from .config import Settings, get_settings
from .guard import CheckoutGuard


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """Return the application-wide HTTP client opened by the lifespan.

    ``None`` when the app runs without its lifespan; verification then opens
    a client per call.
    """

    return getattr(request.app.state, "http_client", None)


def get_checkout_guard(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient | None = Depends(get_http_client),
) -> CheckoutGuard:
    """Return a guard bound to the current reCAPTCHA settings."""

    return CheckoutGuard(settings.recaptcha, client=client)


def extract_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidate = forwarded.split(",", 1)[0].strip()
        if candidate:
            return candidate
    client = request.client
    if client and client.host:
        return client.host
    return None


__all__ = [
    "extract_client_ip",
    "get_checkout_guard",
    "get_http_client",
    "get_settings",
]
