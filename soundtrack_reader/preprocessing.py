"""Image preparation stages: cropping, luminance, contrast and noise suppression."""

from __future__ import annotations

import cv2
import numpy as np

from .exceptions import MalformedInputError
from .models import PixelBuffer, Region

# ITU-R BT.601 luma weights for R, G, B
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def scale_if_needed(img: np.ndarray, max_dimension: int = 2000) -> np.ndarray:
    """Downscale an image so that its longest side is at most max_dimension.

    Args:
        img: Input image as numpy array
        max_dimension: Largest allowed width or height in pixels

    Returns:
        The input image if it already fits, otherwise a resized copy
    """
    img_h, img_w = img.shape[:2]
    if img_w <= max_dimension and img_h <= max_dimension:
        return img

    scale = max_dimension / max(img_w, img_h)
    new_w = int(img_w * scale)
    new_h = int(img_h * scale)
    return cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA)


def crop_region(pixels: PixelBuffer, region: Region) -> np.ndarray:
    """Copy the region out of the pixel buffer.

    Args:
        pixels: Source image
        region: Rectangle to copy, must lie inside the image

    Returns:
        New (height, width, 4) uint8 array in RGBA order

    Raises:
        MalformedInputError: If the region is not fully inside the buffer
    """
    if not region.is_inside(pixels.width, pixels.height):
        raise MalformedInputError(
            f"region {region.as_tuple()} outside {pixels.width}x{pixels.height} image"
        )
    x, y, width, height = region.as_tuple()
    return pixels.data[y : y + height, x : x + width].copy()


def to_luminance(rgba: np.ndarray) -> np.ndarray:
    """Convert RGBA samples to a float brightness field. Opacity is ignored."""
    return rgba[:, :, :3].astype(np.float64) @ LUMA_WEIGHTS


def stretch_contrast(gray: np.ndarray) -> np.ndarray:
    """Linearly rescale a brightness field so it spans 0-255.

    A perfectly uniform field is returned unchanged.
    """
    low = gray.min()
    high = gray.max()
    value_range = high - low
    if value_range == 0:
        return gray

    return (gray - low) / value_range * 255


def box_blur(gray: np.ndarray, radius: int = 3) -> np.ndarray:
    """Apply a square mean filter of the given radius.

    Near the borders only in-bounds neighbours are averaged, so edge pixels
    are not pulled towards zero.

    Args:
        gray: Brightness field
        radius: Neighbourhood radius, 3 gives a 7x7 window

    Returns:
        Blurred field of the same shape (not clamped)
    """
    if radius == 0:
        return gray.astype(np.float64, copy=True)

    height, width = gray.shape
    ksize = 2 * radius + 1

    # Zero border keeps out-of-bounds samples out of the sum
    sums = cv2.boxFilter(
        gray.astype(np.float64),
        cv2.CV_64F,
        (ksize, ksize),
        normalize=False,
        borderType=cv2.BORDER_CONSTANT,
    )

    rows = np.arange(height)
    cols = np.arange(width)
    row_counts = np.minimum(rows + radius, height - 1) - np.maximum(rows - radius, 0) + 1
    col_counts = np.minimum(cols + radius, width - 1) - np.maximum(cols - radius, 0) + 1
    counts = np.outer(row_counts, col_counts)

    return sums / counts
