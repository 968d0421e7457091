"""FastAPI application factory for the checkout gateway."""
from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .logging import setup_logging
from .routes import checkout, system

setup_logging()


@asynccontextmanager
async def _lifespan(app: FastAPI):  # pragma: no cover - exercised via integration tests
    """Open the shared oracle HTTP client and close it on shutdown."""

    app.state.http_client = httpx.AsyncClient()
    try:
        yield
    finally:
        client = app.state.http_client
        app.state.http_client = None
        await client.aclose()


def create_app(*, api_prefix: str | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Parameters
    ----------
    api_prefix:
        Optional path prefix under which the API routers should be mounted. When
        ``None`` the routers are mounted at the application root.
    """

    prefix = "" if api_prefix is None else api_prefix

    app = FastAPI(title="Checkout reCAPTCHA Gateway", version="1.0", lifespan=_lifespan)

    if settings.env == "dev":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    router_prefix = prefix.rstrip("/") if prefix else ""
    if router_prefix and not router_prefix.startswith("/"):
        router_prefix = f"/{router_prefix}"

    app.include_router(checkout.router, prefix=router_prefix)
    app.include_router(system.router, prefix=router_prefix)

    return app


app = create_app(api_prefix="/api")
