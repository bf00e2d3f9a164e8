"""
surface.py
──────────
Raster surface used to shrink a decoded bitmap to the working resolution.

The engine asks a *surface factory* for a surface on every extraction. A
factory that returns ``None`` means this host cannot read pixels at all, which
the engine reports as ``SurfaceUnavailable``.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from PIL import Image

from .decoder import Bitmap


class RasterSurface(Protocol):
    def draw(self, bitmap: Bitmap, width: int, height: int) -> bytes:
        """Draw *bitmap* scaled to ``width × height`` and return its RGBA bytes."""
        ...


SurfaceFactory = Callable[[], Optional[RasterSurface]]


class PillowSurface:
    """Bilinear resampling through Pillow."""

    resample = Image.Resampling.BILINEAR

    def draw(self, bitmap: Bitmap, width: int, height: int) -> bytes:
        if width <= 0 or height <= 0:
            return b""
        if (width, height) == (bitmap.width, bitmap.height):
            return bitmap.pixels
        img = Image.frombytes("RGBA", (bitmap.width, bitmap.height), bitmap.pixels)
        return img.resize((width, height), self.resample).tobytes()


def pillow_surface() -> RasterSurface:
    return PillowSurface()
