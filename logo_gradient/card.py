"""
card.py
───────
What the account cards actually call.

A card passes its own logo and its institution's logo; the first non-empty
one is used. When neither exists, or the image cannot be decoded, the card
gets a static background for its theme instead of an error.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .engine import GradientEngine, default_engine
from .errors import GradientError

logger = logging.getLogger(__name__)

FALLBACK_GRADIENTS = {
    "dark":  "linear-gradient(135deg, rgb(20,20,25) 0%, rgb(144,144,145) 100%)",
    "light": "linear-gradient(135deg, rgb(250,250,250) 0%, rgb(244,244,245) 100%)",
}


def fallback_gradient(theme: str = "dark") -> str:
    try:
        return FALLBACK_GRADIENTS[theme]
    except KeyError:
        raise ValueError(f"Unknown card theme: {theme!r}") from None


def first_logo_url(*urls: Optional[str]) -> str:
    """``logo ?? institution_logo ?? ""``"""
    return next((u for u in urls if u), "")


async def card_gradient(
    *urls: Optional[str],
    engine: Optional[GradientEngine] = None,
    theme: str = "dark",
    options: Optional[Mapping[str, Any]] = None,
) -> str:
    """Background-image value for a card showing the first available logo."""
    fallback = fallback_gradient(theme)
    url = first_logo_url(*urls)
    if not url:
        return fallback

    engine = engine or default_engine()
    try:
        result = await engine.extract_gradient(url, options)
    except GradientError as exc:
        logger.info("Using %s fallback gradient for %s: %s", theme, url, exc)
        return fallback
    return result.gradient
