"""FastAPI application package for the checkout gateway."""

from .logging import setup_logging

setup_logging()

__all__ = ["setup_logging"]
