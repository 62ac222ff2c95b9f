"""Command-line interface for optical soundtrack extraction."""

import argparse
import logging
import sys
from pathlib import Path

DEFAULT_DELIM = "_"


def write_error(output_path: str | None, message: str) -> None:
    """Write error message next to the requested output for callers to read."""
    if output_path:
        error_path = output_path + ".err"
        with open(error_path, "w") as f:
            f.write(message)


def detect_delim(filename: str) -> str | None:
    """Detect delimiter from filename by finding most common separator."""
    stem = Path(filename).stem
    for delim in ["_", "-", "."]:
        if delim in stem:
            return delim
    return None


def build_output_filename(input_path: str, suffix: str, delim: str, extension: str = ".wav") -> str:
    p = Path(input_path)
    parts = [p.stem]
    if suffix:
        parts.append(suffix)
    return str(p.with_name(delim.join(parts) + extension))


def add_extract_arguments(parser: argparse.ArgumentParser) -> None:
    """Add waveform extraction arguments to a parser."""
    parser.add_argument("input", help="Input image file")
    parser.add_argument(
        "-o",
        "--output",
        help="Output WAV filename (default: <input>_<suffix>.wav next to the input)",
    )
    parser.add_argument("--suffix", default="track", help="Suffix for output filename")
    parser.add_argument(
        "--delim",
        help="Delimiter between name/suffix (auto-detected from filename if not set)",
    )
    parser.add_argument(
        "--roi",
        help="Region of interest as x,y,width,height in pixels of the (scaled) image. "
        "Defaults to a tall strip near the left edge of the image",
    )
    parser.add_argument(
        "--csv",
        help="Also write the per-row waveform to this file, one value per line",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the per-row waveform to stdout instead of writing a WAV file",
    )
    parser.add_argument(
        "--max-dimension",
        type=int,
        default=2000,
        help="Downscale the image so its longest side is at most this many pixels "
        "(0 disables scaling, default: 2000)",
    )
    parser.add_argument(
        "--debug-dir",
        help="Directory to save debug visualization images",
    )
    parser.add_argument(
        "--config",
        help="JSON extraction configuration (inline JSON string or path to .json file)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log each extraction stage",
    )


def parse_extraction_config(config_arg: str | None):
    """Parse extraction config from CLI argument.

    Args:
        config_arg: Either inline JSON string or path to .json file

    Returns:
        ExtractionConfig object or None if not provided
    """
    if not config_arg:
        return None

    from .models import ExtractionConfig

    config_path = Path(config_arg)
    try:
        if config_path.suffix == ".json" and config_path.exists():
            return ExtractionConfig.from_file(config_path)
        return ExtractionConfig.from_json(config_arg)
    except Exception as e:
        raise ValueError(f"Invalid --config: {e}")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_extract(args: argparse.Namespace) -> None:
    """Extract a waveform from an image and save it as audio."""
    import cv2

    from .audio import resample_waveform, write_wav
    from .exceptions import ImageReadError, WaveformExtractionError
    from .extraction import extract_waveform
    from .models import ExtractionConfig, PixelBuffer, Region
    from .preprocessing import scale_if_needed

    configure_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.output:
        output_path = args.output
    else:
        delim = args.delim or detect_delim(args.input) or DEFAULT_DELIM
        output_path = build_output_filename(args.input, args.suffix, delim)

    # Errors are reported next to the WAV path only when the caller chose it
    error_output = args.output if args.output else None

    try:
        config = parse_extraction_config(args.config) or ExtractionConfig()
        region = Region.parse(args.roi) if args.roi else None
    except ValueError as e:
        write_error(error_output, str(e))
        sys.exit(str(e))

    img = cv2.imread(args.input, cv2.IMREAD_UNCHANGED)
    if img is None:
        err = ImageReadError(args.input)
        write_error(error_output, err.user_message)
        sys.exit(err.user_message)

    if args.max_dimension > 0:
        img = scale_if_needed(img, args.max_dimension)

    visualizer = None
    if args.debug_dir:
        from .visualizer import DebugVisualizer

        visualizer = DebugVisualizer(args.debug_dir)

    try:
        pixels = PixelBuffer.from_bgr(img)
        if region is None:
            region = Region.default_for(pixels.width, pixels.height)
        region = region.clamp(pixels.width, pixels.height)
        logger.debug("Image %dx%d, region %s", pixels.width, pixels.height, region.as_tuple())

        waveform = extract_waveform(pixels, region, config=config, visualizer=visualizer)
    except WaveformExtractionError as e:
        write_error(error_output, e.user_message)
        sys.exit(e.user_message)
    except Exception as e:
        msg = f"Unexpected error: {e}"
        write_error(error_output, msg)
        sys.exit(msg)

    if args.csv:
        with open(args.csv, "w") as f:
            for value in waveform:
                f.write(f"{value:.6f}\n")

    if args.stdout:
        for value in waveform:
            print(f"{value:.6f}")
        return

    samples = resample_waveform(waveform, config.audio.target_samples)
    write_wav(output_path, samples, config.audio.sample_rate)


def run_config(args: argparse.Namespace) -> None:
    """Print the default extraction configuration."""
    from .models import ExtractionConfig

    print(ExtractionConfig.default_json())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Optical soundtrack reader: turn a photo of a film's sound track into audio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  soundtrack-reader extract frame.jpg                          Extract using the default region
  soundtrack-reader extract frame.jpg --roi 40,100,90,800 -o out.wav
  soundtrack-reader extract frame.jpg --roi 40,100,90,800 --stdout
  soundtrack-reader config                                     Print default configuration
""",
    )
    subparsers = parser.add_subparsers(dest="command")

    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract a waveform from an image of an optical soundtrack",
    )
    add_extract_arguments(extract_parser)
    extract_parser.set_defaults(func=run_extract)

    config_parser = subparsers.add_parser(
        "config",
        help="Print the default extraction configuration as JSON",
    )
    config_parser.set_defaults(func=run_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
