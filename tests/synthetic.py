"""Synthetic optical soundtrack images for tests."""

import numpy as np

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
GRAY = (128, 128, 128, 255)


def make_rgba(h: int, w: int, color: tuple = BLACK) -> np.ndarray:
    """Create a solid-colour RGBA uint8 array."""
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[:] = color
    return img


def make_track(band_widths, width: int, offset: int = 0) -> np.ndarray:
    """Create an RGBA image with one light band per row on a dark background.

    Row y is white from column offset to offset + band_widths[y].
    """
    img = make_rgba(len(band_widths), width)
    for y, band in enumerate(band_widths):
        img[y, offset : offset + band] = WHITE
    return img


def sine_widths(rows: int = 200, period: int = 50) -> np.ndarray:
    """Band widths following a slow sine wave between 5 and 35 pixels."""
    y = np.arange(rows)
    return np.round(20 + 15 * np.sin(2 * np.pi * y / period)).astype(int)


def make_sine_image() -> np.ndarray:
    """120x200 RGBA image with a sine-modulated track at columns 30-90."""
    img = make_rgba(200, 120)
    img[:, 30:90] = make_track(sine_widths(), 60, offset=10)
    return img
