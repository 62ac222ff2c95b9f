"""Tests for pixel buffers, regions and extraction configuration."""

import json

import cv2
import numpy as np
import pytest

from soundtrack_reader.exceptions import ErrorKind, ImageReadError, MalformedInputError
from soundtrack_reader.models import ExtractionConfig, PixelBuffer, Region

from .synthetic import make_rgba


# ─── PixelBuffer ──────────────────────────────────────────────────────────────

def test_pixel_buffer_is_read_only():
    pixels = PixelBuffer(make_rgba(30, 40))
    assert pixels.width == 40
    assert pixels.height == 30
    with pytest.raises(ValueError):
        pixels.data[0, 0, 0] = 1


def test_pixel_buffer_copies_source():
    src = make_rgba(20, 20)
    pixels = PixelBuffer(src)
    src[0, 0] = (255, 255, 255, 255)
    assert pixels.data[0, 0, 0] == 0


def test_pixel_buffer_rejects_three_channels():
    with pytest.raises(MalformedInputError):
        PixelBuffer(np.zeros((20, 20, 3), dtype=np.uint8))


def test_pixel_buffer_rejects_float_samples():
    with pytest.raises(MalformedInputError) as exc_info:
        PixelBuffer(np.zeros((20, 20, 4), dtype=np.float32))
    assert exc_info.value.kind is ErrorKind.MALFORMED_INPUT


def test_from_bgr_reorders_channels():
    bgr = np.zeros((2, 2, 3), dtype=np.uint8)
    bgr[:] = (0, 0, 255)  # pure red in OpenCV order
    pixels = PixelBuffer.from_bgr(bgr)
    assert tuple(pixels.data[0, 0]) == (255, 0, 0, 255)


def test_from_bgr_accepts_grayscale():
    gray = np.full((3, 5), 77, dtype=np.uint8)
    pixels = PixelBuffer.from_bgr(gray)
    assert pixels.data.shape == (3, 5, 4)
    assert tuple(pixels.data[1, 1]) == (77, 77, 77, 255)


def test_from_file_roundtrip(tmp_path):
    bgr = np.zeros((25, 30, 3), dtype=np.uint8)
    bgr[:, :10] = (255, 255, 255)
    path = tmp_path / "track.png"
    cv2.imwrite(str(path), bgr)

    pixels = PixelBuffer.from_file(path)
    assert (pixels.width, pixels.height) == (30, 25)
    assert pixels.data[0, 0, 0] == 255
    assert pixels.data[0, 20, 0] == 0


def test_from_bgr_reduces_16_bit_samples():
    bgr = np.zeros((20, 20, 3), dtype=np.uint16)
    bgr[:, 10:] = 65535
    pixels = PixelBuffer.from_bgr(bgr)
    assert pixels.data.dtype == np.uint8
    assert pixels.data[0, 0, 0] == 0
    assert pixels.data[0, 15, 0] == 255


def test_from_file_reads_16_bit_png(tmp_path):
    bgr = np.full((25, 30, 3), 32896, dtype=np.uint16)
    path = tmp_path / "deep.png"
    cv2.imwrite(str(path), bgr)

    pixels = PixelBuffer.from_file(path)
    assert pixels.data.dtype == np.uint8
    assert pixels.data[0, 0, 0] == 128


def test_from_file_missing_raises(tmp_path):
    with pytest.raises(ImageReadError) as exc_info:
        PixelBuffer.from_file(tmp_path / "missing.png")
    assert exc_info.value.kind is ErrorKind.IMAGE_READ


# ─── Region ───────────────────────────────────────────────────────────────────

def test_region_parse():
    assert Region.parse("10,20,30,40") == Region(10, 20, 30, 40)
    assert Region.parse("1:2:3:4") == Region(1, 2, 3, 4)


@pytest.mark.parametrize("value", ["0,0,inf,30", "0,0,nan,30", "a,b,c,d", "1,2,,4"])
def test_region_parse_rejects_non_numbers(value):
    with pytest.raises(ValueError, match="Invalid region format"):
        Region.parse(value)


def test_region_parse_wrong_count_raises():
    with pytest.raises(ValueError):
        Region.parse("10,20,30")


def test_default_region_is_tall_strip_near_left_edge():
    region = Region.default_for(1000, 500)
    assert region == Region(50, 50, 120, 400)


def test_clamp_inside_is_identity():
    region = Region(5, 5, 20, 20)
    assert region.clamp(100, 100) == region


def test_clamp_overhanging_region():
    assert Region(-10, 90, 50, 50).clamp(100, 100) == Region(0, 90, 40, 10)


def test_clamp_fully_outside_is_empty():
    clamped = Region(200, 200, 50, 50).clamp(100, 100)
    assert clamped.width == 0
    assert clamped.height == 0


def test_is_inside():
    assert Region(0, 0, 100, 100).is_inside(100, 100)
    assert not Region(1, 0, 100, 100).is_inside(100, 100)
    assert not Region(-1, 0, 10, 10).is_inside(100, 100)


# ─── ExtractionConfig ─────────────────────────────────────────────────────────

def test_default_config_matches_pipeline_constants():
    config = ExtractionConfig()
    assert config.blur.radius == 3
    assert config.validation.min_std_dev == 0.01
    assert config.validation.min_region_size == 20
    assert config.smoothing.window == 5
    assert config.audio.target_samples == 1837


def test_config_from_json_partial_override():
    config = ExtractionConfig.from_json('{"blur": {"radius": 1}, "smoothing": {"window": 3}}')
    assert config.blur.radius == 1
    assert config.smoothing.window == 3
    assert config.validation.min_std_dev == 0.01


def test_default_json_parses_back():
    data = json.loads(ExtractionConfig.default_json())
    assert data["blur"]["radius"] == 3
    assert ExtractionConfig.from_dict(data) == ExtractionConfig()


def test_config_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"validation": {"min_std_dev": 0.05}}')
    assert ExtractionConfig.from_file(path).validation.min_std_dev == 0.05


@pytest.mark.parametrize(
    "payload",
    [
        '{"smoothing": {"window": 4}}',
        '{"blur": {"radius": -1}}',
        '{"threshold": {"bins": 128}}',
        '{"audio": {"sample_rate": 100}}',
        '{"blur": {"size": 3}}',
        '{"sharpen": {}}',
        '{"blur": 3}',
        '{"blur": {"radius": 2.5}}',
        '{"blur": {"radius": true}}',
        '{"smoothing": {"window": 5.0}}',
        '{"validation": {"min_region_size": "20"}}',
        '{"audio": {"sample_rate": 44100.5}}',
        '[1, 2]',
    ],
)
def test_invalid_config_rejected(payload):
    with pytest.raises(ValueError):
        ExtractionConfig.from_json(payload)
