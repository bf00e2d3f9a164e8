#!/usr/bin/env python3
"""
main.py
───────
Logo Gradient – command-line entry point.

Usage examples
──────────────
  # Gradient for a remote logo
  python main.py https://example.com/logos/bank.png

  # Local file, custom angle, JSON output
  python main.py assets/logo.png --angle 90 --json

  # Engine defaults from a config file
  python main.py assets/logo.png --config gradient.json --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from logo_gradient.errors import GradientError
from logo_gradient.utils import build_engine, load_config


# ── CLI definition ─────────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="logo-gradient",
        description=(
            "Derive a two-stop card background gradient from a brand or "
            "institution logo."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "url",
        help="Image URL, data: URI, file:// URL or local path.",
    )
    p.add_argument(
        "--config", "-c",
        metavar="PATH",
        help="Path to a JSON config file.",
    )
    p.add_argument("--angle", type=float, metavar="DEG", help="Gradient angle in degrees.")
    p.add_argument("--sample-rate", type=int, metavar="N", help="Sample every N-th pixel.")
    p.add_argument(
        "--luminance-threshold", type=float, metavar="L",
        help="Brightest luminance (0-255) still counted.",
    )
    p.add_argument(
        "--min-contrast", type=float, metavar="D",
        help="RGB distance the secondary colour must exceed.",
    )
    p.add_argument("--json", action="store_true", help="Print the full result as JSON.")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return p


def _overrides(args: argparse.Namespace) -> dict:
    pairs = {
        "angle":               args.angle,
        "sample_rate":         args.sample_rate,
        "luminance_threshold": args.luminance_threshold,
        "min_contrast":        args.min_contrast,
    }
    return {k: v for k, v in pairs.items() if v is not None}


# ── Main ───────────────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args   = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    try:
        cfg    = load_config(args.config) if args.config else {}
        engine = build_engine(cfg)
        result = asyncio.run(engine.extract_gradient(args.url, **_overrides(args)))
    except (FileNotFoundError, ValueError, GradientError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.gradient)
    return 0


if __name__ == "__main__":
    sys.exit(main())
