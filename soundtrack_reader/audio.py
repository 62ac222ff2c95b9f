"""Rendering an extracted waveform as a frame of audio."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import soundfile as sf

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
FRAME_RATE = 24
FRAME_SAMPLES = int(SAMPLE_RATE / FRAME_RATE)  # 1837


def resample_waveform(waveform: np.ndarray, target_samples: int = FRAME_SAMPLES) -> np.ndarray:
    """Stretch a waveform to a fixed number of samples by linear interpolation.

    Target sample i reads source position i / target_samples * len(waveform);
    the right neighbour is clamped to the last source sample.

    Args:
        waveform: Source samples, one per scanned row
        target_samples: Output length

    Returns:
        float32 array of length target_samples
    """
    waveform = np.asarray(waveform, dtype=np.float64)
    source_len = len(waveform)
    if source_len == 0:
        raise ValueError("Cannot resample an empty waveform")

    position = np.arange(target_samples) / target_samples * source_len
    index0 = np.floor(position).astype(np.intp)
    index1 = np.minimum(index0 + 1, source_len - 1)
    t = position - index0

    resampled = waveform[index0] + (waveform[index1] - waveform[index0]) * t
    return resampled.astype(np.float32)


def write_wav(path: str | Path, samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> None:
    """Write mono 16-bit PCM audio, clipping samples to -1..1."""
    clipped = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    sf.write(str(path), clipped, sample_rate, subtype="PCM_16")
    logger.info(
        "Wrote %d samples (%s) to %s",
        len(clipped),
        format_duration(duration_ms(len(clipped), sample_rate)),
        path,
    )


def duration_ms(sample_count: int, sample_rate: int = SAMPLE_RATE) -> float:
    """Return playback duration in milliseconds."""
    return sample_count / sample_rate * 1000


def format_duration(ms: float) -> str:
    """Format a duration as "~42ms" below one second, "~1.50s" above."""
    if ms < 1000:
        return f"~{int(ms + 0.5)}ms"
    return f"~{ms / 1000:.2f}s"
