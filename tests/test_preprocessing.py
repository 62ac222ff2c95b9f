"""Tests for cropping, luminance, contrast stretch, blur and image scaling."""

import numpy as np
import pytest

from soundtrack_reader.exceptions import MalformedInputError
from soundtrack_reader.models import PixelBuffer, Region
from soundtrack_reader.preprocessing import (
    box_blur,
    crop_region,
    scale_if_needed,
    stretch_contrast,
    to_luminance,
)

from .synthetic import make_rgba


def _reference_blur(field: np.ndarray, radius: int) -> np.ndarray:
    """Straightforward clipped-neighbourhood mean for comparison."""
    height, width = field.shape
    out = np.zeros_like(field, dtype=np.float64)
    for y in range(height):
        for x in range(width):
            window = field[
                max(0, y - radius) : min(height, y + radius + 1),
                max(0, x - radius) : min(width, x + radius + 1),
            ]
            out[y, x] = window.mean()
    return out


# ─── Region extraction ────────────────────────────────────────────────────────

def test_crop_region_copies_subgrid():
    img = make_rgba(40, 50)
    img[12, 7] = (10, 20, 30, 40)
    pixels = PixelBuffer(img)

    crop = crop_region(pixels, Region(5, 10, 20, 25))
    assert crop.shape == (25, 20, 4)
    assert tuple(crop[2, 2]) == (10, 20, 30, 40)

    crop[0, 0] = 99
    assert pixels.data[10, 5, 0] == 0


@pytest.mark.parametrize(
    "region",
    [Region(-1, 0, 20, 20), Region(0, 0, 51, 20), Region(40, 30, 20, 20), Region(100, 100, 20, 20)],
)
def test_crop_region_outside_raises(region):
    pixels = PixelBuffer(make_rgba(40, 50))
    with pytest.raises(MalformedInputError):
        crop_region(pixels, region)


# ─── Luminance ────────────────────────────────────────────────────────────────

def test_luminance_weights():
    rgba = np.array([[[255, 0, 0, 0], [0, 255, 0, 255], [0, 0, 255, 128]]], dtype=np.uint8)
    gray = to_luminance(rgba)
    np.testing.assert_allclose(gray, [[0.299 * 255, 0.587 * 255, 0.114 * 255]])


def test_luminance_ignores_opacity():
    a = make_rgba(2, 2, (100, 150, 200, 0))
    b = make_rgba(2, 2, (100, 150, 200, 255))
    np.testing.assert_array_equal(to_luminance(a), to_luminance(b))


# ─── Contrast stretch ─────────────────────────────────────────────────────────

def test_stretch_contrast_full_range():
    gray = np.array([[10.0, 20.0], [30.0, 20.0]])
    np.testing.assert_allclose(stretch_contrast(gray), [[0.0, 127.5], [255.0, 127.5]])


def test_stretch_contrast_uniform_passthrough():
    gray = np.full((4, 4), 42.0)
    np.testing.assert_array_equal(stretch_contrast(gray), gray)


# ─── Box blur ─────────────────────────────────────────────────────────────────

def test_box_blur_matches_clipped_reference():
    rng = np.random.default_rng(0)
    field = rng.uniform(0, 255, size=(23, 31))
    np.testing.assert_allclose(box_blur(field, 3), _reference_blur(field, 3), rtol=1e-9, atol=1e-9)


def test_box_blur_corner_uses_in_bounds_neighbours_only():
    field = np.zeros((10, 10))
    field[0, 0] = 160.0
    blurred = box_blur(field, 3)
    # Corner neighbourhood is clipped to 4x4 = 16 samples
    assert blurred[0, 0] == pytest.approx(10.0)
    # Interior pixel at distance 3 sees a full 7x7 window
    assert blurred[3, 3] == pytest.approx(160.0 / 49)


def test_box_blur_constant_field_is_unchanged():
    field = np.full((20, 20), 87.5)
    np.testing.assert_allclose(box_blur(field, 3), field)


def test_box_blur_radius_zero_copies():
    field = np.arange(12, dtype=np.float64).reshape(3, 4)
    blurred = box_blur(field, 0)
    np.testing.assert_array_equal(blurred, field)
    assert blurred is not field


def test_box_blur_not_clamped():
    field = np.full((5, 5), 300.0)
    assert box_blur(field, 1).max() == pytest.approx(300.0)


# ─── Image scaling ────────────────────────────────────────────────────────────

def test_scale_if_needed_small_image_untouched():
    img = np.zeros((100, 200, 3), dtype=np.uint8)
    assert scale_if_needed(img) is img


def test_scale_if_needed_limits_longest_side():
    img = np.zeros((1000, 4000, 3), dtype=np.uint8)
    scaled = scale_if_needed(img, max_dimension=2000)
    assert scaled.shape == (500, 2000, 3)
