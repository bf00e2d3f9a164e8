"""
api/gradient.py
───────────────
Vercel Python serverless function – POST /api/gradient

Derives a card background gradient from a logo URL. Results are memoised for
the lifetime of the warm function instance.

Request body (JSON):
{
  "url":     "https://…/logos/bank.png",
  "options": {"angle": 135, "minContrast": 40},   // optional
  "theme":   "dark"                                // optional, "dark" | "light"
}

Response (JSON):
{
  "gradient": "linear-gradient(135deg, rgb(10,10,10), rgb(200,10,10))",
  "colors":   ["10,10,10", "200,10,10"],           // null when fallback is true
  "fallback": false
}
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from http.server import BaseHTTPRequestHandler
from typing import Any, Dict, Optional

# ── Make project root importable so we can use logo_gradient.* ────────────────
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

from logo_gradient.card import fallback_gradient
from logo_gradient.decoder import REMOTE_SCHEMES, UrlBitmapDecoder
from logo_gradient.engine import GradientEngine
from logo_gradient.errors import GradientError

logger = logging.getLogger(__name__)

# ── CORS headers sent with every response ─────────────────────────────────────
_CORS = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


# ── Vercel handler class ───────────────────────────────────────────────────────

class handler(BaseHTTPRequestHandler):

    def log_message(self, fmt, *args):  # silence default access-log noise
        pass

    # ── CORS preflight ─────────────────────────────────────────────────────────
    def do_OPTIONS(self):
        self.send_response(200)
        for k, v in _CORS.items():
            self.send_header(k, v)
        self.end_headers()

    # ── Main POST ──────────────────────────────────────────────────────────────
    def do_POST(self):
        try:
            length = int(self.headers.get("Content-Length", 0))
            data   = json.loads(self.rfile.read(length))
        except ValueError as exc:
            self._send_json(400, {"error": f"Invalid request body: {exc}"})
            return

        try:
            payload = _run(data)
        except ValueError as exc:
            self._send_json(400, {"error": str(exc)})
            return

        self._send_json(200, payload)

    # ── Response helper ────────────────────────────────────────────────────────
    def _send_json(self, code: int, payload: Dict[str, Any]) -> None:
        body = json.dumps(payload).encode()
        self.send_response(code)
        for k, v in _CORS.items():
            self.send_header(k, v)
        self.send_header("Content-Type",   "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


# ── Core logic ─────────────────────────────────────────────────────────────────

_ENGINE: Optional[GradientEngine] = None


def _engine() -> GradientEngine:
    """Shared engine for this instance; requests never touch the local disk."""
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = GradientEngine(decoder=UrlBitmapDecoder(allowed_schemes=REMOTE_SCHEMES))
    return _ENGINE


def _run(data: Any, engine: Optional[GradientEngine] = None) -> Dict[str, Any]:
    """
    Resolve the request into a response payload.

    Raises ``ValueError`` for malformed requests. Image failures are not
    errors here: the card still needs a background, so the theme fallback is
    returned with ``fallback: true``.
    """
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object.")

    url     = data.get("url") or ""
    theme   = data.get("theme", "dark")
    options = data.get("options") or {}
    if not isinstance(url, str):
        raise ValueError("'url' must be a string.")
    if not isinstance(options, dict):
        raise ValueError("'options' must be a JSON object.")

    fallback = fallback_gradient(theme)
    engine   = engine or _engine()
    # Validates options even when there is no URL to extract from
    resolved = engine.resolve_options(options)

    if not url:
        return {"gradient": fallback, "colors": None, "fallback": True}

    try:
        result = asyncio.run(engine.extract_gradient(url, resolved))
    except GradientError as exc:
        logger.warning("Gradient extraction failed for %s: %s", url, exc)
        return {"gradient": fallback, "colors": None, "fallback": True}

    return {**result.to_dict(), "fallback": False}
