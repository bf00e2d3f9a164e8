"""Tests for sampling, histogram building and colour selection."""

import math

import pytest

from logo_gradient.color_sampler import (
    FALLBACK_PRIMARY,
    FALLBACK_SECONDARY,
    ColorSampler,
    select_colors,
    top_candidates,
    working_size,
)
from logo_gradient.options import GradientOptions

from .conftest import make_bitmap, solid_bitmap


class RecordingSurface:
    def __init__(self):
        self.sizes = []

    def draw(self, bitmap, width, height):
        self.sizes.append((width, height))
        return bytes(width * height * 4)


# ── Sampler ───────────────────────────────────────────────────────────────────

def test_working_size_never_upscales():
    assert working_size(4, 4) == (4, 4)
    assert working_size(255, 100) == (255, 100)
    assert working_size(256, 256) == (256, 256)


def test_working_size_bounds_long_side():
    assert working_size(512, 256) == (256, 128)
    assert working_size(1024, 300) == (256, 75)
    assert working_size(300, 1024) == (75, 256)


def test_working_size_of_empty_image():
    assert working_size(0, 0) == (0, 0)
    assert working_size(0, 50) == (0, 0)
    assert working_size(1024, 1) == (256, 0)


def test_small_image_is_sampled_at_source_resolution():
    bitmap = make_bitmap(2, 2, [(1, 2, 3, 255), (4, 5, 6, 255), (7, 8, 9, 255), (10, 11, 12, 255)])
    sampler = ColorSampler(bitmap, GradientOptions(sample_rate=1))
    assert list(sampler.samples()) == [
        (1, 2, 3, 255), (4, 5, 6, 255), (7, 8, 9, 255), (10, 11, 12, 255),
    ]


def test_sample_rate_strides_over_pixels():
    pixels = [(i, 0, 0, 255) for i in range(20)]
    sampler = ColorSampler(make_bitmap(20, 1, pixels), GradientOptions(sample_rate=6))
    assert [s[0] for s in sampler.samples()] == [0, 6, 12, 18]


def test_large_image_is_drawn_at_working_size():
    surface = RecordingSurface()
    sampler = ColorSampler(solid_bitmap(512, 128, (0, 0, 0, 255)), surface=surface)
    list(sampler.samples())
    assert surface.sizes == [(256, 64)]


def test_downscaled_solid_image_keeps_its_colour():
    sampler = ColorSampler(solid_bitmap(512, 256, (30, 40, 50, 255)))
    assert sampler.working_size() == (256, 128)
    assert sampler.histogram() == {"30,40,50": 256 * 128 // 6 + 1}


def test_zero_sized_image_yields_no_samples():
    surface = RecordingSurface()
    sampler = ColorSampler(make_bitmap(0, 0, []), surface=surface)
    assert list(sampler.samples()) == []
    assert surface.sizes == []
    assert sampler.select() == (FALLBACK_PRIMARY, FALLBACK_SECONDARY)


# ── Histogram ─────────────────────────────────────────────────────────────────

def test_histogram_skips_translucent_pixels():
    pixels = [(10, 10, 10, 199), (20, 20, 20, 200), (30, 30, 30, 0)]
    sampler = ColorSampler(make_bitmap(3, 1, pixels), GradientOptions(sample_rate=1))
    assert sampler.histogram() == {"20,20,20": 1}


def test_histogram_skips_bright_pixels():
    pixels = [(100, 100, 100, 255), (120, 120, 120, 255), (255, 255, 255, 255)]
    sampler = ColorSampler(make_bitmap(3, 1, pixels), GradientOptions(sample_rate=1))
    assert sampler.histogram() == {"100,100,100": 1}


def test_luminance_threshold_is_inclusive():
    bitmap = make_bitmap(1, 1, [(0, 0, 0, 255)])
    kept = ColorSampler(bitmap, GradientOptions(luminance_threshold=0, sample_rate=1))
    dropped = ColorSampler(bitmap, GradientOptions(luminance_threshold=-1, sample_rate=1))
    assert kept.histogram() == {"0,0,0": 1}
    assert dropped.histogram() == {}


def test_histogram_ignores_alpha_in_key():
    pixels = [(5, 6, 7, 255), (5, 6, 7, 210), (5, 6, 7, 200)]
    sampler = ColorSampler(make_bitmap(3, 1, pixels), GradientOptions(sample_rate=1))
    assert sampler.histogram() == {"5,6,7": 3}


def test_histogram_preserves_first_seen_order():
    pixels = [(3, 3, 3, 255), (1, 1, 1, 255), (2, 2, 2, 255), (1, 1, 1, 255)]
    sampler = ColorSampler(make_bitmap(4, 1, pixels), GradientOptions(sample_rate=1))
    assert list(sampler.histogram()) == ["3,3,3", "1,1,1", "2,2,2"]


def test_luminance_weights():
    assert ColorSampler.luminance((255, 255, 255)) == pytest.approx(255.0)
    assert ColorSampler.luminance((200, 10, 10)) == pytest.approx(50.394)


# ── Selection ─────────────────────────────────────────────────────────────────

def test_top_candidates_limited_to_five_with_stable_ties():
    hist = {"1,1,1": 2, "2,2,2": 5, "3,3,3": 2, "4,4,4": 1, "5,5,5": 2, "6,6,6": 2}
    assert top_candidates(hist) == ["2,2,2", "1,1,1", "3,3,3", "5,5,5", "6,6,6"]


def test_select_from_empty_histogram_uses_fallbacks():
    assert select_colors({}, 40) == ("24,24,27", "9,9,11")


def test_select_skips_candidates_too_close_to_primary():
    hist = {"10,10,10": 9, "20,20,20": 8, "100,10,10": 3}
    assert select_colors(hist, 40) == ("10,10,10", "100,10,10")


def test_select_only_considers_top_five():
    hist = {"0,0,0": 10, "1,0,0": 9, "2,0,0": 8, "3,0,0": 7, "4,0,0": 6, "90,0,0": 5}
    assert select_colors(hist, 40) == ("0,0,0", FALLBACK_SECONDARY)


def test_select_requires_distance_strictly_greater():
    hist = {"0,0,0": 2, "40,0,0": 1}
    assert select_colors(hist, 40) == ("0,0,0", FALLBACK_SECONDARY)
    assert select_colors(hist, 39.9) == ("0,0,0", "40,0,0")


def test_contrast_invariant_holds_for_mixed_histograms():
    hist = {"12,30,60": 7, "14,28,61": 6, "80,20,20": 4, "60,60,60": 2}
    for min_contrast in (0, 5, 40, 70, 100, 1000):
        primary, secondary = select_colors(hist, min_contrast)
        if secondary != FALLBACK_SECONDARY:
            d = ColorSampler.distance(
                ColorSampler.parse_key(primary), ColorSampler.parse_key(secondary)
            )
            assert d > min_contrast


def test_distance_is_euclidean():
    assert ColorSampler.distance((0, 0, 0), (3, 4, 0)) == 5.0
    assert ColorSampler.distance((10, 10, 10), (200, 10, 10)) == 190.0
    assert ColorSampler.distance((0, 0, 0), (9, 9, 11)) == pytest.approx(math.sqrt(283))


def test_color_key_round_trip():
    assert ColorSampler.color_key((1, 22, 255)) == "1,22,255"
    assert ColorSampler.parse_key("1,22,255") == (1, 22, 255)
