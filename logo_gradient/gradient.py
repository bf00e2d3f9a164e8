"""
gradient.py
───────────
Turns a primary / secondary colour pair into a CSS ``linear-gradient``.

``GradientResult`` is what callers receive and what the cache stores. The
``gradient_from_bitmap`` factory runs the whole synchronous half of the
pipeline (sample → histogram → select → compose) on an already decoded image.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .color_sampler import ColorKey, ColorSampler, RGBColor
from .decoder import Bitmap
from .options import GradientOptions
from .surface import RasterSurface


# ── Result data class ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GradientResult:
    """A composed card background."""

    colors:   Tuple[ColorKey, ColorKey]      # (primary, secondary) as "r,g,b"
    gradient: str                            # CSS linear-gradient(...) value

    @property
    def primary(self) -> RGBColor:
        return ColorSampler.parse_key(self.colors[0])

    @property
    def secondary(self) -> RGBColor:
        return ColorSampler.parse_key(self.colors[1])

    def to_dict(self) -> dict:
        return {"gradient": self.gradient, "colors": list(self.colors)}


# ── Composer ───────────────────────────────────────────────────────────────────

def compose_gradient(angle: float, primary: ColorKey, secondary: ColorKey) -> str:
    """``linear-gradient(<angle>deg, rgb(<primary>), rgb(<secondary>))``"""
    return f"linear-gradient({_format_angle(angle)}deg, rgb({primary}), rgb({secondary}))"


def _format_angle(angle: float) -> str:
    if float(angle).is_integer():
        return str(int(angle))
    return repr(float(angle))


# ── Factory ────────────────────────────────────────────────────────────────────

def gradient_from_bitmap(
    bitmap: Bitmap,
    options: GradientOptions | None = None,
    surface: RasterSurface | None = None,
) -> GradientResult:
    """Sample *bitmap* and compose its gradient. Always succeeds."""
    options = options or GradientOptions()
    primary, secondary = ColorSampler(bitmap, options, surface).select()
    return GradientResult(
        colors=(primary, secondary),
        gradient=compose_gradient(options.angle, primary, secondary),
    )
