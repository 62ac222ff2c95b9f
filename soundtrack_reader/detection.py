"""Per-row boundary detection for the optical track.

Each row of the blurred field is binarized against the global threshold and
searched for the band that marks the track. Strategies are tried in a fixed
order until one finds a band:

1. LIGHT: first sample above the threshold starts the band, the next sample
   at or below it ends the band.
2. DARK: the same search with the predicate inverted.
3. Brightness fallback: mean row brightness / 255.

The fallback yields a brightness ratio while the band strategies yield a
width ratio. Both land in 0-1 and are normalized together downstream; the two
quantities are not distinguished.

Rows are scanned independently of each other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class EdgePolarity(Enum):
    """Which side of the threshold the detected band lies on."""

    LIGHT = "light"  # Band brighter than the threshold
    DARK = "dark"  # Band at or below the threshold


@dataclass(frozen=True)
class RowScan:
    """Result of scanning a single row."""

    amplitude: float
    left: int | None = None
    right: int | None = None
    polarity: EdgePolarity | None = None
    """Strategy that found the band, None when the brightness fallback was used."""

    @property
    def is_fallback(self) -> bool:
        return self.polarity is None


def _find_band(in_band: np.ndarray) -> tuple[int, int] | None:
    """Find the first run of True values.

    Args:
        in_band: Boolean row mask

    Returns:
        (left, right) with right exclusive, right is the row width when the
        run reaches the end of the row. None if the mask has no True value.
    """
    if not in_band.any():
        return None

    left = int(np.argmax(in_band))
    rest = in_band[left:]
    if rest.all():
        return left, len(in_band)
    return left, left + int(np.argmin(rest))


def scan_light_band(row: np.ndarray, threshold: float) -> tuple[int, int] | None:
    """Find the first band of samples strictly above the threshold."""
    return _find_band(row > threshold)


def scan_dark_band(row: np.ndarray, threshold: float) -> tuple[int, int] | None:
    """Find the first band of samples at or below the threshold."""
    return _find_band(row <= threshold)


BandScanner = Callable[[np.ndarray, float], "tuple[int, int] | None"]

# Strategies in priority order
_SCAN_STRATEGIES: tuple[tuple[EdgePolarity, BandScanner], ...] = (
    (EdgePolarity.LIGHT, scan_light_band),
    (EdgePolarity.DARK, scan_dark_band),
)


def scan_row(row: np.ndarray, threshold: float) -> RowScan:
    """Measure the track band in one row.

    Args:
        row: 1D brightness values of the row
        threshold: Global binarization threshold

    Returns:
        RowScan with amplitude (right - left) / width for a detected band,
        or mean brightness / 255 when no strategy found one
    """
    width = len(row)
    for polarity, strategy in _SCAN_STRATEGIES:
        band = strategy(row, threshold)
        if band is not None:
            left, right = band
            return RowScan((right - left) / width, left, right, polarity)

    # Only reachable for rows with NaN samples, which compare False both ways
    return RowScan(float(row.mean()) / 255)


def scan_rows(gray: np.ndarray, threshold: float) -> list[RowScan]:
    """Scan every row of a brightness field, top to bottom."""
    scans = [scan_row(row, threshold) for row in gray]

    counts = {polarity: 0 for polarity in EdgePolarity}
    fallback = 0
    for scan in scans:
        if scan.is_fallback:
            fallback += 1
        else:
            counts[scan.polarity] += 1
    logger.debug(
        "Scanned %d rows: light=%d dark=%d fallback=%d",
        len(scans),
        counts[EdgePolarity.LIGHT],
        counts[EdgePolarity.DARK],
        fallback,
    )
    return scans


def amplitudes(scans: list[RowScan]) -> np.ndarray:
    """Collect the amplitude of each row scan into a raw waveform."""
    return np.array([scan.amplitude for scan in scans], dtype=np.float64)


def find_boundaries(gray: np.ndarray, threshold: float) -> np.ndarray:
    """Extract the raw waveform, one amplitude per row.

    Args:
        gray: Blurred brightness field (height, width)
        threshold: Global binarization threshold

    Returns:
        1D float array of length height
    """
    return amplitudes(scan_rows(gray, threshold))
