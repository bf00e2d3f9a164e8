"""
utils.py
────────
Configuration loading, validation, and engine construction.

Config file layout (every section optional)::

    {
      "options": {"angle": 135, "sampleRate": 6, "luminanceThreshold": 115, "minContrast": 40},
      "cache":   {"max_entries": 512, "ttl_seconds": null, "key_by_options": true},
      "decoder": {"timeout": 10.0, "user_agent": "logo-gradient/0.1",
                  "max_bytes": 10485760, "allowed_schemes": ["http", "https", "data"]}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .cache import GradientCache
from .decoder import (
    ALL_SCHEMES,
    DEFAULT_MAX_BYTES,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    UrlBitmapDecoder,
)
from .engine import GradientEngine
from .options import GradientOptions

Config = Dict[str, Any]

_SECTIONS = {
    "options": None,                                   # validated by GradientOptions
    "cache":   {"max_entries", "ttl_seconds", "key_by_options"},
    "decoder": {"timeout", "user_agent", "max_bytes", "allowed_schemes"},
}


# ── Config I/O ────────────────────────────────────────────────────────────────

def load_config(path: str | Path) -> Config:
    """
    Load a JSON configuration file and return the parsed dict.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file is not valid JSON or fails basic schema checks.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")
    if p.suffix.lower() != ".json":
        raise ValueError(f"Config file must be a .json file, got: {p.suffix}")

    with p.open("r", encoding="utf-8") as fh:
        try:
            cfg = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in config file: {exc}") from exc

    validate_config(cfg)
    return cfg


def validate_config(cfg: Config) -> None:
    if not isinstance(cfg, dict):
        raise ValueError("Config root must be a JSON object.")
    for name, section in cfg.items():
        if name not in _SECTIONS:
            raise ValueError(f"Unknown config section: '{name}'.")
        if not isinstance(section, dict):
            raise ValueError(f"Config section '{name}' must be a JSON object.")
        allowed = _SECTIONS[name]
        if allowed is not None:
            unknown = set(section) - allowed
            if unknown:
                raise ValueError(
                    f"Unknown key(s) in '{name}': {', '.join(sorted(unknown))}."
                )

    # Surface bad option values at load time rather than on first extraction
    options_from_config(cfg)

    cache = cfg.get("cache", {})
    max_entries = cache.get("max_entries")
    if max_entries is not None and (
        isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries < 1
    ):
        raise ValueError("'cache.max_entries' must be a positive integer or null.")
    ttl = cache.get("ttl_seconds")
    if ttl is not None and (
        isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0
    ):
        raise ValueError("'cache.ttl_seconds' must be a positive number or null.")
    if not isinstance(cache.get("key_by_options", True), bool):
        raise ValueError("'cache.key_by_options' must be true or false.")

    decoder = cfg.get("decoder", {})
    timeout = decoder.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError("'decoder.timeout' must be a positive number.")
    max_bytes = decoder.get("max_bytes", DEFAULT_MAX_BYTES)
    if isinstance(max_bytes, bool) or not isinstance(max_bytes, int) or max_bytes < 1:
        raise ValueError("'decoder.max_bytes' must be a positive integer.")
    schemes = decoder.get("allowed_schemes", list(ALL_SCHEMES))
    if not isinstance(schemes, list) or not all(s in ALL_SCHEMES for s in schemes):
        raise ValueError(
            f"'decoder.allowed_schemes' must be a list drawn from {', '.join(ALL_SCHEMES)}."
        )


# ── Builders ──────────────────────────────────────────────────────────────────

def options_from_config(cfg: Config) -> GradientOptions:
    return GradientOptions.from_mapping(cfg.get("options"))


def build_engine(cfg: Config | None = None) -> GradientEngine:
    """Return a ``GradientEngine`` configured from *cfg* (defaults when empty)."""
    cfg = cfg or {}
    validate_config(cfg)
    cache_cfg = cfg.get("cache", {})
    decoder_cfg = cfg.get("decoder", {})
    return GradientEngine(
        decoder=UrlBitmapDecoder(
            timeout=decoder_cfg.get("timeout", DEFAULT_TIMEOUT),
            user_agent=decoder_cfg.get("user_agent", DEFAULT_USER_AGENT),
            allowed_schemes=decoder_cfg.get("allowed_schemes", ALL_SCHEMES),
            max_bytes=decoder_cfg.get("max_bytes", DEFAULT_MAX_BYTES),
        ),
        cache=GradientCache(
            max_entries=cache_cfg.get("max_entries"),
            ttl=cache_cfg.get("ttl_seconds"),
        ),
        defaults=options_from_config(cfg),
        key_by_options=cache_cfg.get("key_by_options", True),
    )
