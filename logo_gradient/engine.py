"""
engine.py
─────────
Asynchronous front door: URL in, memoised ``GradientResult`` out.

Steps run strictly in order – decode, sample, histogram, select, compose,
store. The decode is the only ``await``; everything after it runs to
completion without yielding.

A process-wide default engine backs the module-level ``extract_gradient``.
Hosts that need their own cache lifetime (tests, multi-tenant servers)
create a ``GradientEngine`` and pass it around instead.
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Mapping, Optional

from .cache import GradientCache
from .decoder import BitmapDecoder, UrlBitmapDecoder
from .errors import SurfaceUnavailable
from .gradient import GradientResult, gradient_from_bitmap
from .options import GradientOptions
from .surface import SurfaceFactory, pillow_surface

logger = logging.getLogger(__name__)


class GradientEngine:
    """Decoder + cache + surface, wired together."""

    def __init__(
        self,
        decoder: Optional[BitmapDecoder] = None,
        cache: Optional[GradientCache] = None,
        surface_factory: SurfaceFactory = pillow_surface,
        defaults: Optional[GradientOptions] = None,
        key_by_options: bool = True,
    ) -> None:
        self.decoder = decoder or UrlBitmapDecoder()
        self.cache = cache if cache is not None else GradientCache()
        self.surface_factory = surface_factory
        self.defaults = defaults or GradientOptions()
        self.key_by_options = key_by_options

    def resolve_options(
        self,
        options: Optional[Mapping[str, Any] | GradientOptions] = None,
        **overrides: Any,
    ) -> GradientOptions:
        if isinstance(options, GradientOptions):
            return options.merged(**overrides)
        return self.defaults.merged(options, **overrides)

    def cache_key(self, url: str, options: GradientOptions) -> Hashable:
        return (url, options) if self.key_by_options else url

    def peek(
        self,
        url: str,
        options: Optional[Mapping[str, Any] | GradientOptions] = None,
    ) -> Optional[GradientResult]:
        """Synchronous cache lookup; never decodes."""
        return self.cache.get(self.cache_key(url, self.resolve_options(options)))

    async def extract_gradient(
        self,
        url: str,
        options: Optional[Mapping[str, Any] | GradientOptions] = None,
        **overrides: Any,
    ) -> GradientResult:
        """
        Return the card gradient for the image at *url*.

        Raises
        ------
        DecodeFailure
            The image could not be fetched or decoded. Nothing is cached.
        SurfaceUnavailable
            No raster surface is available to read pixels from.
        ValueError
            Invalid options.
        """
        resolved = self.resolve_options(options, **overrides)
        key = self.cache_key(url, resolved)

        hit = self.cache.get(key)
        if hit is not None:
            logger.debug("Gradient cache hit for %s", url)
            return hit

        async def compute() -> GradientResult:
            return await self._compute(url, resolved)

        return await self.cache.get_or_compute(key, compute)

    async def _compute(self, url: str, options: GradientOptions) -> GradientResult:
        logger.debug("Decoding %s", url)
        bitmap = await self.decoder.decode(url, cross_origin=True)

        surface = self.surface_factory()
        if surface is None:
            raise SurfaceUnavailable("No raster surface available for pixel sampling")

        result = gradient_from_bitmap(bitmap, options, surface)
        logger.debug(
            "Gradient for %s (%dx%d): primary=%s secondary=%s",
            url, bitmap.width, bitmap.height, *result.colors,
        )
        return result


# ── Process-wide default ───────────────────────────────────────────────────────

_default_engine: Optional[GradientEngine] = None


def default_engine() -> GradientEngine:
    global _default_engine
    if _default_engine is None:
        _default_engine = GradientEngine()
    return _default_engine


def set_default_engine(engine: Optional[GradientEngine]) -> None:
    """Replace the shared engine (``None`` resets it to a fresh one on next use)."""
    global _default_engine
    _default_engine = engine


async def extract_gradient(
    url: str,
    options: Optional[Mapping[str, Any] | GradientOptions] = None,
    **overrides: Any,
) -> GradientResult:
    """``GradientEngine.extract_gradient`` on the process-wide engine."""
    return await default_engine().extract_gradient(url, options, **overrides)
