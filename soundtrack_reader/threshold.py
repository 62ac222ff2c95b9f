"""Global binarization threshold selection (Otsu's method)."""

from __future__ import annotations

import numpy as np


def build_histogram(gray: np.ndarray) -> np.ndarray:
    """Count brightness values into 256 bins.

    Values are floored and clamped to 0-255 before binning.

    Args:
        gray: Brightness field (any shape)

    Returns:
        Array of 256 integer bin counts
    """
    bins = np.clip(np.floor(gray), 0, 255).astype(np.intp)
    return np.bincount(bins.ravel(), minlength=256).astype(np.int64)


def otsu_threshold_from_histogram(hist: np.ndarray) -> int:
    """Select the threshold that maximizes between-class variance.

    Candidates are scanned from 0 to 255. A candidate only replaces the
    current best when its variance is strictly greater, so ties go to the
    lowest threshold. Candidates with an empty background class are skipped
    and the scan stops once the foreground class is empty. When no candidate
    produces positive variance (single-valued input) the result is 0.

    Args:
        hist: 256 bin counts

    Returns:
        Threshold bin index (0-255)
    """
    hist = np.asarray(hist, dtype=np.float64)
    total = hist.sum()
    levels = np.arange(256, dtype=np.float64)

    weight_bg = np.cumsum(hist)
    weight_fg = total - weight_bg
    sum_bg = np.cumsum(levels * hist)
    sum_all = sum_bg[-1]

    valid = (weight_bg > 0) & (weight_fg > 0)
    with np.errstate(divide="ignore", invalid="ignore"):
        mean_bg = np.where(valid, sum_bg / weight_bg, 0.0)
        mean_fg = np.where(valid, (sum_all - sum_bg) / weight_fg, 0.0)
    variance = np.where(valid, weight_bg * weight_fg * (mean_bg - mean_fg) ** 2, 0.0)

    best = int(np.argmax(variance))
    if variance[best] <= 0:
        return 0
    return best


def otsu_threshold(gray: np.ndarray) -> int:
    """Compute the Otsu threshold of a brightness field."""
    return otsu_threshold_from_histogram(build_histogram(gray))
