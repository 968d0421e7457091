"""Checkout reCAPTCHA v3 gateway.

The service validates reCAPTCHA v3 tokens attached to checkout submissions
before an order is allowed through.  It is importable as
``backend.checkout_gateway``; the FastAPI application lives in the ``app``
subpackage.
"""

from __future__ import annotations

__all__: list[str] = []
