"""Router modules exposed by the checkout gateway API."""
from . import checkout, system

__all__ = [
    "checkout",
    "system",
]
