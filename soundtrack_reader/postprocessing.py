"""Validation and conditioning of the raw per-row waveform."""

from __future__ import annotations

import numpy as np

from .exceptions import NoVariationError


def standard_deviation(waveform: np.ndarray) -> float:
    """Population standard deviation, 0 for an empty waveform."""
    if len(waveform) == 0:
        return 0.0
    return float(np.std(waveform))


def check_variation(waveform: np.ndarray, min_std_dev: float = 0.01) -> float:
    """Reject waveforms that carry no usable signal.

    Args:
        waveform: Raw per-row amplitudes
        min_std_dev: Smallest acceptable standard deviation

    Returns:
        The measured standard deviation

    Raises:
        NoVariationError: If the standard deviation is below min_std_dev
    """
    std_dev = standard_deviation(waveform)
    if std_dev < min_std_dev:
        raise NoVariationError(std_dev, min_std_dev)
    return std_dev


def normalize_waveform(waveform: np.ndarray) -> np.ndarray:
    """Rescale to -1..1 using the waveform's own min and max.

    A constant waveform maps to all zeros.
    """
    low = waveform.min()
    high = waveform.max()
    value_range = high - low
    if value_range == 0:
        return np.zeros(len(waveform), dtype=np.float64)

    return (waveform - low) / value_range * 2 - 1


def remove_dc_offset(waveform: np.ndarray) -> np.ndarray:
    """Subtract the mean so the waveform is centered on zero."""
    return waveform - waveform.mean()


def moving_average(waveform: np.ndarray, window: int = 5) -> np.ndarray:
    """Centered moving average.

    At both ends the window is truncated to the samples that exist, so the
    average is taken over fewer values instead of padding with zeros.

    Args:
        waveform: Input samples
        window: Window size, window // 2 samples are taken on each side

    Returns:
        Smoothed samples, same length as the input
    """
    half = window // 2
    if half == 0 or len(waveform) == 0:
        return waveform.astype(np.float64, copy=True)

    n = len(waveform)
    index = np.arange(n)
    start = np.maximum(index - half, 0)
    stop = np.minimum(index + half, n - 1) + 1

    cumulative = np.concatenate(([0.0], np.cumsum(waveform, dtype=np.float64)))
    return (cumulative[stop] - cumulative[start]) / (stop - start)
