"""Custom exceptions for waveform extraction."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Tag identifying why an extraction failed."""

    REGION_TOO_SMALL = "region_too_small"
    NO_VARIATION = "no_variation"
    MALFORMED_INPUT = "malformed_input"
    IMAGE_READ = "image_read"


class WaveformExtractionError(Exception):
    """Base exception for waveform extraction errors."""

    kind: ErrorKind

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class ImageReadError(WaveformExtractionError):
    """Failed to read input image."""

    kind = ErrorKind.IMAGE_READ

    def __init__(self, path: str):
        super().__init__(
            f"Could not read image: {path}",
            "Could not read image file. The file may be corrupted or in an unsupported format.",
        )
        self.path = path


class RegionTooSmallError(WaveformExtractionError):
    """Selected region is narrower or shorter than the minimum size."""

    kind = ErrorKind.REGION_TOO_SMALL

    def __init__(self, width: int, height: int, min_size: int = 20):
        super().__init__(
            f"Region too small: {width}x{height} (minimum {min_size}x{min_size})",
            "Please select a larger region. The selection should cover the full "
            "height of the optical track.",
        )
        self.width = width
        self.height = height
        self.min_size = min_size


class NoVariationError(WaveformExtractionError):
    """Scanned track shows no usable amplitude variation."""

    kind = ErrorKind.NO_VARIATION

    def __init__(self, std_dev: float, min_std_dev: float = 0.01):
        super().__init__(
            f"No variation in extracted signal (std dev {std_dev:.6f} < {min_std_dev})",
            "The selected region appears blank. This might be a silent section of "
            "film, or the track wasn't captured clearly.",
        )
        self.std_dev = std_dev
        self.min_std_dev = min_std_dev


class MalformedInputError(WaveformExtractionError):
    """Pixel buffer or region bounds are inconsistent."""

    kind = ErrorKind.MALFORMED_INPUT

    def __init__(self, detail: str = ""):
        msg = f"Malformed input: {detail}" if detail else "Malformed input"
        super().__init__(
            msg,
            "Couldn't detect audio in the selected region. Try adjusting your selection "
            "to better align with the optical track.",
        )
        self.detail = detail
