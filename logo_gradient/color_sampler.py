"""
color_sampler.py
────────────────
Finds the dominant dark colour of a logo and a companion colour that can be
told apart from it.

Pipeline for one bitmap
───────────────────────
  1. Shrink to at most 256 px on the long side (never enlarge).
  2. Walk every ``sample_rate``-th pixel of the flattened RGBA buffer.
  3. Count exact RGB triples of pixels that are opaque (alpha ≥ 200) and
     dark (luminance ≤ threshold). White text goes on top of the gradient,
     so bright colours are useless here.
  4. Primary = most frequent colour; secondary = the next most frequent one
     whose RGB distance to the primary exceeds ``min_contrast``.
"""

from __future__ import annotations

import math
from typing import Dict, Iterator, List, Tuple

from .decoder import Bitmap
from .options import GradientOptions
from .surface import PillowSurface, RasterSurface

# Convenience type aliases
RGBColor    = Tuple[int, int, int]
PixelSample = Tuple[int, int, int, int]
ColorKey    = str
Histogram   = Dict[ColorKey, int]

MAX_WORKING_DIMENSION = 256
MIN_ALPHA             = 200
CANDIDATE_COUNT       = 5

FALLBACK_PRIMARY:   ColorKey = "24,24,27"    # zinc-900
FALLBACK_SECONDARY: ColorKey = "9,9,11"      # zinc-950


class ColorSampler:
    """Sample a decoded bitmap and pick a primary / secondary colour pair."""

    def __init__(
        self,
        bitmap: Bitmap,
        options: GradientOptions | None = None,
        surface: RasterSurface | None = None,
    ) -> None:
        self.bitmap = bitmap
        self.options = options or GradientOptions()
        self.surface = surface or PillowSurface()

    # ── Sampler ───────────────────────────────────────────────────────────────

    def working_size(self) -> Tuple[int, int]:
        """Raster size the bitmap is sampled at."""
        return working_size(self.bitmap.width, self.bitmap.height)

    def samples(self) -> Iterator[PixelSample]:
        """Yield every ``sample_rate``-th pixel at working resolution."""
        width, height = self.working_size()
        if width == 0 or height == 0:
            return
        data = self.surface.draw(self.bitmap, width, height)
        step = 4 * self.options.sample_rate
        for i in range(0, len(data) - 3, step):
            yield data[i], data[i + 1], data[i + 2], data[i + 3]

    # ── Histogram ─────────────────────────────────────────────────────────────

    def histogram(self) -> Histogram:
        """Count opaque, dark pixels by exact RGB value, in first-seen order."""
        threshold = self.options.luminance_threshold
        counts: Histogram = {}
        for r, g, b, a in self.samples():
            if a < MIN_ALPHA:
                continue
            if self.luminance((r, g, b)) > threshold:
                continue
            key = self.color_key((r, g, b))
            counts[key] = counts.get(key, 0) + 1
        return counts

    # ── Selection ─────────────────────────────────────────────────────────────

    def select(self) -> Tuple[ColorKey, ColorKey]:
        """Return ``(primary, secondary)`` colour keys for this bitmap."""
        return select_colors(self.histogram(), self.options.min_contrast)

    # ── Static colour-math helpers ────────────────────────────────────────────

    @staticmethod
    def luminance(rgb: RGBColor) -> float:
        """Rec. 709 luma on the 0–255 scale (no gamma linearisation)."""
        r, g, b = rgb
        return 0.2126 * r + 0.7152 * g + 0.0722 * b

    @staticmethod
    def distance(a: RGBColor, b: RGBColor) -> float:
        """Plain Euclidean distance in RGB space."""
        return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))

    @staticmethod
    def color_key(rgb: RGBColor) -> ColorKey:
        return "{},{},{}".format(*rgb)

    @staticmethod
    def parse_key(key: ColorKey) -> RGBColor:
        r, g, b = (int(part) for part in key.split(","))
        return (r, g, b)


# ── Module-level helpers ───────────────────────────────────────────────────────

def working_size(width: int, height: int) -> Tuple[int, int]:
    """
    Scale ``width × height`` down so the long side is at most 256 px.

    The scale is capped at 1, so small images keep their exact size.
    """
    longest = max(width, height)
    if longest <= 0:
        return (0, 0)
    scale = min(1.0, MAX_WORKING_DIMENSION / longest)
    return (math.floor(width * scale), math.floor(height * scale))


def top_candidates(histogram: Histogram, limit: int = CANDIDATE_COUNT) -> List[ColorKey]:
    """Most frequent colours first; ties keep histogram order."""
    ranked = sorted(histogram.items(), key=lambda item: item[1], reverse=True)
    return [key for key, _ in ranked[:limit]]


def select_colors(histogram: Histogram, min_contrast: float) -> Tuple[ColorKey, ColorKey]:
    """
    Pick the primary and secondary colours from a histogram.

    Falls back to ``24,24,27`` for the primary when nothing qualified, and to
    ``9,9,11`` for the secondary when no other candidate is far enough away.
    """
    candidates = top_candidates(histogram)
    if not candidates:
        return FALLBACK_PRIMARY, FALLBACK_SECONDARY

    primary = candidates[0]
    primary_rgb = ColorSampler.parse_key(primary)
    for key in candidates[1:]:
        if ColorSampler.distance(primary_rgb, ColorSampler.parse_key(key)) > min_contrast:
            return primary, key
    return primary, FALLBACK_SECONDARY
