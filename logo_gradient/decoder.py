"""
decoder.py
──────────
Turns an image URL into raw RGBA pixels.

The engine only depends on the ``BitmapDecoder`` protocol; ``UrlBitmapDecoder``
is the stock implementation. It understands

  • ``http://`` / ``https://`` URLs  (downloaded with requests)
  • ``data:image/...;base64,`` URIs  (e.g. logos inlined by the frontend)
  • ``file://`` URLs and plain filesystem paths

and decodes whatever it receives with Pillow. ``allowed_schemes`` narrows the
accepted sources; anything serving untrusted callers uses ``REMOTE_SCHEMES``
so the local filesystem is never read. Every source is capped at
``max_bytes`` and at Pillow's ``MAX_IMAGE_PIXELS``.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol
from urllib.parse import unquote, urlparse

import requests
from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailure

DEFAULT_TIMEOUT    = 10.0
DEFAULT_USER_AGENT = "logo-gradient/0.1"
DEFAULT_MAX_BYTES  = 10 * 1024 * 1024

ALL_SCHEMES    = ("http", "https", "data", "file")
REMOTE_SCHEMES = ("http", "https", "data")      # never the local filesystem


# ── Decoded image ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Bitmap:
    """A decoded image: RGBA, 8 bits per channel, row-major."""

    width:  int
    height: int
    pixels: bytes

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Bitmap size must be non-negative, got {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"Bitmap of {self.width}x{self.height} needs {expected} bytes, "
                f"got {len(self.pixels)}"
            )

    @classmethod
    def from_image(cls, img: Image.Image) -> "Bitmap":
        rgba = img.convert("RGBA")
        return cls(rgba.width, rgba.height, rgba.tobytes())


class BitmapDecoder(Protocol):
    """Anything that can asynchronously decode a URL into a ``Bitmap``."""

    async def decode(self, url: str, *, cross_origin: bool = True) -> Bitmap:
        ...


# ── Default decoder ────────────────────────────────────────────────────────────

class UrlBitmapDecoder:
    """Fetch and decode an image with requests + Pillow."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
        allowed_schemes: Iterable[str] = ALL_SCHEMES,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.allowed_schemes = frozenset(s.lower() for s in allowed_schemes)
        self.max_bytes = max_bytes
        self._session = session or requests.Session()

    async def decode(self, url: str, *, cross_origin: bool = True) -> Bitmap:
        """
        Fetch *url* and decode it into RGBA pixels.

        Raises
        ------
        DecodeFailure
            On network errors, non-2xx responses, unreadable or oversized
            image data, a source outside ``allowed_schemes``, or a remote URL
            requested without cross-origin access.
        """
        if not url:
            raise DecodeFailure(url, "empty URL")
        scheme = source_scheme(url)
        if scheme not in self.allowed_schemes:
            raise DecodeFailure(url[:64], f"'{scheme}' sources are not allowed")
        return await asyncio.to_thread(self._decode_blocking, url, scheme, cross_origin)

    # ── Internals ──────────────────────────────────────────────────────────────

    def _decode_blocking(self, url: str, scheme: str, cross_origin: bool) -> Bitmap:
        data = self._read_bytes(url, scheme, cross_origin)
        try:
            with Image.open(io.BytesIO(data)) as img:
                limit = Image.MAX_IMAGE_PIXELS
                if limit is not None and img.width * img.height > limit:
                    raise DecodeFailure(
                        url[:64], f"image of {img.width}x{img.height} exceeds {limit} pixels"
                    )
                return Bitmap.from_image(img)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise DecodeFailure(url[:64], f"unreadable image data ({exc})") from exc

    def _read_bytes(self, url: str, scheme: str, cross_origin: bool) -> bytes:
        if scheme in ("http", "https"):
            if not cross_origin:
                raise DecodeFailure(url, "cross-origin pixel access not requested")
            return self._fetch(url)

        if scheme == "data":
            data = _read_data_uri(url)
            if len(data) > self.max_bytes:
                raise DecodeFailure(url[:64], f"image exceeds {self.max_bytes} bytes")
            return data

        if urlparse(url).scheme.lower() == "file":
            path = Path(unquote(urlparse(url).path))
        else:
            path = Path(url)
        try:
            with path.open("rb") as fh:
                data = fh.read(self.max_bytes + 1)
        except OSError as exc:
            raise DecodeFailure(url, f"cannot read file ({exc})") from exc
        if len(data) > self.max_bytes:
            raise DecodeFailure(url, f"file exceeds {self.max_bytes} bytes")
        return data

    def _fetch(self, url: str) -> bytes:
        try:
            with self._session.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                stream=True,
            ) as resp:
                resp.raise_for_status()
                declared = resp.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise DecodeFailure(url, f"response of {declared} bytes exceeds {self.max_bytes}")
                buf = bytearray()
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    buf.extend(chunk)
                    if len(buf) > self.max_bytes:
                        raise DecodeFailure(url, f"response exceeds {self.max_bytes} bytes")
        except requests.RequestException as exc:
            raise DecodeFailure(url, f"download failed ({exc})") from exc
        return bytes(buf)


def source_scheme(url: str) -> str:
    """``http``, ``https``, ``data`` or ``file`` (plain paths count as files)."""
    scheme = urlparse(url).scheme.lower()
    if scheme in ("http", "https", "data"):
        return scheme
    return "file"


def _read_data_uri(url: str) -> bytes:
    """Decode a ``data:`` URI. Only base64 payloads are supported."""
    header, sep, payload = url.partition(",")
    if not sep or ";base64" not in header:
        raise DecodeFailure(url[:64], "data URI is not base64 encoded")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeFailure(url[:64], f"invalid base64 payload ({exc})") from exc
