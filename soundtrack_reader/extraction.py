"""Optical soundtrack to waveform extraction."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from .detection import amplitudes, scan_rows
from .exceptions import NoVariationError, RegionTooSmallError
from .models import ExtractionConfig, PixelBuffer, Region
from .postprocessing import check_variation, moving_average, normalize_waveform, remove_dc_offset
from .preprocessing import box_blur, crop_region, stretch_contrast, to_luminance
from .threshold import build_histogram, otsu_threshold_from_histogram

if TYPE_CHECKING:
    from .visualizer import DebugVisualizer

logger = logging.getLogger(__name__)


def extract_raw_waveform(
    pixels: PixelBuffer,
    region: Region,
    config: ExtractionConfig | None = None,
    visualizer: DebugVisualizer | None = None,
) -> np.ndarray:
    """Measure the track band in every row of the region.

    Runs cropping, luminance, contrast stretch, blur, threshold selection and
    boundary scanning. No validation of the result is done here.

    Args:
        pixels: Source image
        region: Region containing the optical track
        config: Extraction parameters, defaults when None
        visualizer: Optional debug visualizer to save intermediate images

    Returns:
        Raw amplitudes in 0-1, one per region row

    Raises:
        RegionTooSmallError: If the region is below the minimum size
        MalformedInputError: If the region is outside the image
    """
    if config is None:
        config = ExtractionConfig()

    min_size = config.validation.min_region_size
    if region.width < min_size or region.height < min_size:
        raise RegionTooSmallError(region.width, region.height, min_size)

    rgba = crop_region(pixels, region)
    gray = to_luminance(rgba)
    stretched = stretch_contrast(gray)
    blurred = box_blur(stretched, config.blur.radius)

    histogram = build_histogram(blurred)
    threshold = otsu_threshold_from_histogram(histogram)
    logger.debug("Region %s: threshold=%d", region.as_tuple(), threshold)

    scans = scan_rows(blurred, threshold)
    raw = amplitudes(scans)

    if visualizer:
        visualizer.save_region(pixels, region)
        visualizer.save_grayscale(gray, stretched, blurred)
        visualizer.save_histogram(histogram, threshold)
        visualizer.save_row_edges(blurred, threshold, scans)

    return raw


def condition_waveform(raw: np.ndarray, config: ExtractionConfig | None = None) -> np.ndarray:
    """Validate a raw waveform and turn it into a zero-mean signal.

    Args:
        raw: Raw per-row amplitudes
        config: Extraction parameters, defaults when None

    Returns:
        Normalized, DC-free, smoothed waveform of the same length

    Raises:
        NoVariationError: If the raw waveform is too flat to carry a signal
    """
    if config is None:
        config = ExtractionConfig()

    std_dev = check_variation(raw, config.validation.min_std_dev)
    logger.debug("Raw waveform std dev %.4f", std_dev)

    normalized = normalize_waveform(raw)
    centered = remove_dc_offset(normalized)
    return moving_average(centered, config.smoothing.window)


def extract_waveform(
    pixels: PixelBuffer,
    region: Region,
    config: ExtractionConfig | None = None,
    visualizer: DebugVisualizer | None = None,
) -> np.ndarray:
    """Extract an audio waveform from an optical soundtrack region.

    Each row of the region becomes one sample. Extraction is all-or-nothing:
    either a full waveform is returned or an exception is raised.

    Args:
        pixels: Source image
        region: Region containing the optical track, inside the image
        config: Extraction parameters, defaults when None
        visualizer: Optional debug visualizer to save intermediate images

    Returns:
        Waveform of length region.height, zero mean

    Raises:
        RegionTooSmallError: If the region is below the minimum size
        MalformedInputError: If the region is outside the image
        NoVariationError: If the region holds no discernible track
    """
    raw = extract_raw_waveform(pixels, region, config, visualizer)

    try:
        waveform = condition_waveform(raw, config)
    except NoVariationError:
        if visualizer:
            visualizer.save_waveform(raw)
        raise

    if visualizer:
        visualizer.save_waveform(raw, waveform)

    logger.info("Extracted %d samples from region %s", len(waveform), region.as_tuple())
    return waveform
