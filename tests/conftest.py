"""
Shared fixtures for the logo-gradient test suite.

Provides:
- Synthetic bitmap builders and an oversized PNG header
- A counting fake decoder (no network, no Pillow decoding)
- A fresh engine per test and a reset process-wide engine
"""

import asyncio
import struct
import zlib
from typing import Dict, List, Sequence, Tuple

import pytest

from logo_gradient.cache import GradientCache
from logo_gradient.decoder import Bitmap
from logo_gradient.engine import GradientEngine, set_default_engine
from logo_gradient.errors import DecodeFailure

Pixel = Tuple[int, int, int, int]


def make_bitmap(width: int, height: int, pixels: Sequence[Pixel]) -> Bitmap:
    """Build an RGBA bitmap from a row-major list of (r, g, b, a) pixels."""
    assert len(pixels) == width * height
    return Bitmap(width, height, bytes(c for px in pixels for c in px))


def solid_bitmap(width: int, height: int, pixel: Pixel) -> Bitmap:
    return make_bitmap(width, height, [pixel] * (width * height))


class FakeDecoder:
    """Returns canned bitmaps per URL and counts every decode call."""

    def __init__(self, bitmaps: Dict[str, Bitmap] = None, delay: float = 0.0):
        self.bitmaps = dict(bitmaps or {})
        self.delay = delay
        self.calls: List[str] = []
        self.cross_origin_flags: List[bool] = []

    async def decode(self, url: str, *, cross_origin: bool = True) -> Bitmap:
        self.calls.append(url)
        self.cross_origin_flags.append(cross_origin)
        if self.delay:
            await asyncio.sleep(self.delay)
        try:
            return self.bitmaps[url]
        except KeyError:
            raise DecodeFailure(url, "not found") from None


@pytest.fixture
def decoder():
    return FakeDecoder()


@pytest.fixture
def engine(decoder):
    return GradientEngine(decoder=decoder, cache=GradientCache())


@pytest.fixture(autouse=True)
def reset_default_engine():
    set_default_engine(None)
    yield
    set_default_engine(None)


def oversized_png(width=30000, height=30000):
    """A PNG whose header claims *width* × *height* pixels but carries no image data."""

    def chunk(kind, data=b""):
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT") + chunk(b"IEND")
