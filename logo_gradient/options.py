"""
options.py
──────────
Tuning knobs for a single gradient extraction.

``GradientOptions`` is immutable. Callers override any subset of fields and
the rest keep their defaults. Mappings may use either the Python field names
or the camelCase names used on the wire by the card components.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

# camelCase → field name
_WIRE_NAMES = {
    "luminanceThreshold": "luminance_threshold",
    "sampleRate":         "sample_rate",
    "angle":              "angle",
    "minContrast":        "min_contrast",
}


@dataclass(frozen=True)
class GradientOptions:
    """Per-call extraction settings."""

    luminance_threshold: float = 115     # Brightest pixel (0–255) still counted
    sample_rate:         int   = 6       # Pixel stride while sampling
    angle:               float = 135     # Gradient direction in degrees
    min_contrast:        float = 40      # RGB distance required for the secondary

    def __post_init__(self) -> None:
        for name in ("luminance_threshold", "angle", "min_contrast"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
        if (
            isinstance(self.sample_rate, bool)
            or not isinstance(self.sample_rate, int)
            or self.sample_rate < 1
        ):
            raise ValueError(
                f"sample_rate must be a positive integer, got {self.sample_rate!r}"
            )
        if self.min_contrast < 0:
            raise ValueError(
                f"min_contrast must be non-negative, got {self.min_contrast!r}"
            )

    # ── Construction helpers ──────────────────────────────────────────────────

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "GradientOptions":
        """Build options from a (possibly partial) mapping of overrides."""
        return cls().merged(data)

    def merged(self, data: Optional[Mapping[str, Any]] = None, **overrides: Any) -> "GradientOptions":
        """
        Return a copy with *data* and *overrides* applied.

        Raises
        ------
        ValueError
            On unknown keys or invalid values.
        """
        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in {**(data or {}), **overrides}.items():
            name = _WIRE_NAMES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown gradient option: {key!r}")
            changes[name] = value
        if not changes:
            return self
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Wire representation (camelCase keys)."""
        return {wire: getattr(self, name) for wire, name in _WIRE_NAMES.items()}
