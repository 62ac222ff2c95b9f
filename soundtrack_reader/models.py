"""Data models for waveform extraction."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import cv2
import numpy as np

from .exceptions import ImageReadError, MalformedInputError


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Read-only RGBA image, row-major with a top-left origin.

    The array is copied on construction and flagged non-writeable, so
    the same buffer can be shared between extractions of different regions.
    """

    data: np.ndarray

    def __post_init__(self):
        data = np.asarray(self.data)
        if data.ndim != 3 or data.shape[2] != 4:
            raise MalformedInputError(f"expected (height, width, 4) array, got shape {data.shape}")
        if data.dtype != np.uint8:
            raise MalformedInputError(f"expected uint8 samples, got {data.dtype}")
        frozen = np.array(data, copy=True)
        frozen.flags.writeable = False
        object.__setattr__(self, "data", frozen)

    @classmethod
    def from_bgr(cls, img: np.ndarray) -> PixelBuffer:
        """Create PixelBuffer from an OpenCV image (grayscale, BGR or BGRA).

        16-bit images are reduced to 8 bits; other sample types are scaled
        so their maximum maps to 255.
        """
        if img.dtype == np.uint16:
            img = cv2.convertScaleAbs(img, alpha=255.0 / 65535.0)
        elif img.dtype != np.uint8:
            img = cv2.convertScaleAbs(img, alpha=255.0 / max(1.0, float(np.nanmax(img))))

        if img.ndim == 2:
            rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
        elif img.shape[2] == 3:
            rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
        elif img.shape[2] == 4:
            rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
        else:
            raise MalformedInputError(f"unsupported channel count: {img.shape[2]}")
        return cls(rgba)

    @classmethod
    def from_file(cls, path: str | Path) -> PixelBuffer:
        """Decode an image file into a PixelBuffer."""
        img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if img is None:
            raise ImageReadError(str(path))
        return cls.from_bgr(img)

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    def to_bgr(self) -> np.ndarray:
        """Return a BGR copy for OpenCV drawing and saving."""
        return cv2.cvtColor(self.data, cv2.COLOR_RGBA2BGR)


@dataclass(frozen=True)
class Region:
    """Rectangular region of interest in pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def parse(cls, value: str) -> Region:
        """Parse region string "x,y,width,height".

        Separators: , : / ;
        """
        parts = [p.strip() for p in re.split(r"[,:;/]", value)]
        if len(parts) != 4:
            raise ValueError(f"Invalid region format: {value}")
        try:
            x, y, width, height = (int(float(p)) for p in parts)
        except (ValueError, OverflowError):
            raise ValueError(f"Invalid region format: {value}") from None
        return cls(x, y, width, height)

    @classmethod
    def default_for(cls, img_w: int, img_h: int) -> Region:
        """Initial selection: a tall narrow strip near the left edge of the image."""
        return cls(
            int(img_w * 0.05),
            int(img_h * 0.1),
            int(img_w * 0.12),
            int(img_h * 0.8),
        )

    def clamp(self, img_w: int, img_h: int) -> Region:
        """Return the part of this region that lies inside an img_w x img_h image."""
        left = min(max(self.x, 0), img_w)
        top = min(max(self.y, 0), img_h)
        right = min(max(self.x + self.width, left), img_w)
        bottom = min(max(self.y + self.height, top), img_h)
        return Region(left, top, right - left, bottom - top)

    def is_inside(self, img_w: int, img_h: int) -> bool:
        """Check if the region fits entirely inside an img_w x img_h image."""
        return (
            self.x >= 0
            and self.y >= 0
            and self.width >= 0
            and self.height >= 0
            and self.x + self.width <= img_w
            and self.y + self.height <= img_h
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        """Return region as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)


# =============================================================================
# Extraction Configuration Classes
# =============================================================================


def _check_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class BlurParams:
    """Parameters for the box blur noise suppressor."""

    radius: int = 3

    def validate(self) -> None:
        """Validate parameter ranges."""
        _check_int("blur.radius", self.radius)
        if not (0 <= self.radius <= 25):
            raise ValueError(f"blur.radius must be 0-25, got {self.radius}")


@dataclass
class ThresholdParams:
    """Parameters for histogram threshold selection."""

    bins: int = 256

    def validate(self) -> None:
        """Validate parameter ranges."""
        _check_int("threshold.bins", self.bins)
        if self.bins != 256:
            raise ValueError(f"threshold.bins must be 256, got {self.bins}")


@dataclass
class ValidationParams:
    """Parameters for rejecting unusable regions and signals."""

    min_std_dev: float = 0.01
    min_region_size: int = 20

    def validate(self) -> None:
        """Validate parameter ranges."""
        if not (0.0 <= self.min_std_dev <= 1.0):
            raise ValueError(f"validation.min_std_dev must be 0.0-1.0, got {self.min_std_dev}")
        _check_int("validation.min_region_size", self.min_region_size)
        if self.min_region_size < 1:
            raise ValueError(
                f"validation.min_region_size must be >= 1, got {self.min_region_size}"
            )


@dataclass
class SmoothingParams:
    """Parameters for the moving average smoother."""

    window: int = 5

    def validate(self) -> None:
        """Validate parameter ranges."""
        _check_int("smoothing.window", self.window)
        if not (1 <= self.window <= 101):
            raise ValueError(f"smoothing.window must be 1-101, got {self.window}")
        if self.window % 2 == 0:
            raise ValueError(f"smoothing.window must be odd, got {self.window}")


@dataclass
class AudioParams:
    """Parameters for rendering a waveform as one frame of audio."""

    sample_rate: int = 44100
    frame_rate: float = 24.0

    def validate(self) -> None:
        """Validate parameter ranges."""
        _check_int("audio.sample_rate", self.sample_rate)
        if not (8000 <= self.sample_rate <= 192000):
            raise ValueError(f"audio.sample_rate must be 8000-192000, got {self.sample_rate}")
        if not (1.0 <= self.frame_rate <= 120.0):
            raise ValueError(f"audio.frame_rate must be 1-120, got {self.frame_rate}")

    @property
    def target_samples(self) -> int:
        """Number of audio samples covering one film frame (1837 at 44.1kHz/24fps)."""
        return int(self.sample_rate / self.frame_rate)


@dataclass
class ExtractionConfig:
    """Complete configuration for waveform extraction."""

    blur: BlurParams = field(default_factory=BlurParams)
    threshold: ThresholdParams = field(default_factory=ThresholdParams)
    validation: ValidationParams = field(default_factory=ValidationParams)
    smoothing: SmoothingParams = field(default_factory=SmoothingParams)
    audio: AudioParams = field(default_factory=AudioParams)

    def validate(self) -> None:
        """Validate all configuration."""
        self.blur.validate()
        self.threshold.validate()
        self.validation.validate()
        self.smoothing.validate()
        self.audio.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractionConfig:
        """Create ExtractionConfig from dictionary.

        Unknown sections are rejected; missing keys keep their defaults.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a JSON object, got {type(data).__name__}")

        config = cls()

        for section, values in data.items():
            if section not in ("blur", "threshold", "validation", "smoothing", "audio"):
                raise ValueError(f"Unknown config section: {section}")
            if not isinstance(values, dict):
                raise ValueError(f"Config section {section} must be an object, got {values!r}")
            params = getattr(config, section)
            for key, value in values.items():
                if key not in params.__dataclass_fields__:
                    raise ValueError(f"Unknown config key: {section}.{key}")
                setattr(params, key, value)

        config.validate()
        return config

    @classmethod
    def from_json(cls, json_str: str) -> ExtractionConfig:
        """Parse ExtractionConfig from JSON string."""
        data = json.loads(json_str)
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> ExtractionConfig:
        """Load ExtractionConfig from JSON file."""
        with open(path) as f:
            return cls.from_json(f.read())

    @classmethod
    def default_json(cls) -> str:
        """Return default configuration as formatted JSON string."""
        config = cls()
        return config.to_json()
