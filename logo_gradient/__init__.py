"""Logo Gradient – card backgrounds derived from institution logos."""
from .cache import GradientCache
from .card import card_gradient, fallback_gradient, first_logo_url
from .color_sampler import ColorSampler, select_colors, working_size
from .decoder import Bitmap, BitmapDecoder, UrlBitmapDecoder
from .engine import GradientEngine, default_engine, extract_gradient, set_default_engine
from .errors import DecodeFailure, GradientError, SurfaceUnavailable
from .gradient import GradientResult, compose_gradient, gradient_from_bitmap
from .options import GradientOptions
from .utils import build_engine, load_config

__all__ = [
    "Bitmap",
    "BitmapDecoder",
    "ColorSampler",
    "DecodeFailure",
    "GradientCache",
    "GradientEngine",
    "GradientError",
    "GradientOptions",
    "GradientResult",
    "SurfaceUnavailable",
    "UrlBitmapDecoder",
    "build_engine",
    "card_gradient",
    "compose_gradient",
    "default_engine",
    "extract_gradient",
    "fallback_gradient",
    "first_logo_url",
    "gradient_from_bitmap",
    "load_config",
    "select_colors",
    "set_default_engine",
    "working_size",
]
