"""Waveform extraction from photographed optical film soundtracks."""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy import to avoid loading cv2 for CLI subcommands that don't need it."""
    if name in ("extract_waveform", "extract_raw_waveform"):
        from .extraction import extract_raw_waveform, extract_waveform
        return {"extract_waveform": extract_waveform, "extract_raw_waveform": extract_raw_waveform}[name]
    if name in ("ExtractionConfig", "PixelBuffer", "Region"):
        from .models import ExtractionConfig, PixelBuffer, Region
        return {"ExtractionConfig": ExtractionConfig, "PixelBuffer": PixelBuffer, "Region": Region}[name]
    if name in (
        "ErrorKind",
        "ImageReadError",
        "MalformedInputError",
        "NoVariationError",
        "RegionTooSmallError",
        "WaveformExtractionError",
    ):
        from . import exceptions
        return getattr(exceptions, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "extract_waveform",
    "extract_raw_waveform",
    "PixelBuffer",
    "Region",
    "ExtractionConfig",
    "ErrorKind",
    "WaveformExtractionError",
    "ImageReadError",
    "RegionTooSmallError",
    "NoVariationError",
    "MalformedInputError",
]
