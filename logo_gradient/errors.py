"""
errors.py
─────────
Failure types raised by the gradient engine.

Only genuine failures live here. An image with no usable dark pixels is not
an error – it produces the fallback colours.
"""

from __future__ import annotations


class GradientError(Exception):
    """Base class for every failure the engine surfaces to its caller."""


class DecodeFailure(GradientError):
    """The image could not be fetched or decoded into pixels."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Could not decode image at {url!r}: {reason}")


class SurfaceUnavailable(GradientError):
    """The host cannot provide a raster surface to read pixels from."""
