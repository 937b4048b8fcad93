"""CLI commands for file fingerprinting.

Results are written to stdout as one JSON object per line; logs go to stderr.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import toml

from fileprint.common import ConfigLoader, LogContext, log_fields, setup_logging
from .config import FingerprinterConfig, SamplingParams
from .full import compute_full_fingerprint, detect_media_type
from .mime_detector import MediaTypeDetector
from .sparse import compute_sparse_fingerprint

APP_NAME = "fileprint"

logger = logging.getLogger(__package__ or __name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _emit(record: dict) -> None:
    print(json.dumps(record), flush=True)


def full_command(
    config: FingerprinterConfig,
    paths: Sequence[Path],
    label_override: Optional[str] = None,
) -> int:
    """Print the full fingerprint of each file.

    Args:
        config: Configuration object
        paths: Files to fingerprint
        label_override: Label used for every file instead of its own name

    Returns:
        Exit code (0 if every checksum was computed)
    """
    detector = MediaTypeDetector.from_config(config.media_types)
    failures = 0

    for path in paths:
        with LogContext(logger, path=str(path)):
            fingerprint = compute_full_fingerprint(
                path,
                label=label_override,
                detector=detector,
                buffer_size=config.full.buffer_size_bytes,
            )
        if fingerprint.failed:
            failures += 1
        _emit({'path': str(path), **fingerprint.to_dict()})

    if failures:
        logger.warning("Full fingerprint incomplete", extra=log_fields(failed=failures, total=len(paths)))
    return 1 if failures else 0


def sparse_command(
    config: FingerprinterConfig,
    paths: Sequence[Path],
    window_size_override: Optional[int] = None,
    max_windows_override: Optional[int] = None,
    min_stride_override: Optional[int] = None,
) -> int:
    """Print the sparse checksum of each file.

    Args:
        config: Configuration object
        paths: Files to sample
        window_size_override: Optional override for window size
        max_windows_override: Optional override for window count
        min_stride_override: Optional override for minimum stride

    Returns:
        Exit code (0 if every checksum was determined)
    """
    params = config.sampling
    overrides = {
        'window_size_bytes': window_size_override,
        'max_windows': max_windows_override,
        'minimum_stride_bytes': min_stride_override,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        params = SamplingParams(**{**params.model_dump(), **overrides})

    logger.info("Sampling parameters", extra=log_fields(**params.model_dump()))
    failures = 0

    for path in paths:
        with LogContext(logger, path=str(path)):
            checksum = compute_sparse_fingerprint(path, params)
        if not checksum.determined:
            failures += 1
        _emit({'path': str(path), 'checksum': checksum.hex, 'determined': checksum.determined})

    return 1 if failures else 0


def mime_command(
    config: FingerprinterConfig,
    paths: Sequence[Path],
    label_override: Optional[str] = None,
) -> int:
    """Print the media type of each file without checksumming it."""
    detector = MediaTypeDetector.from_config(config.media_types)
    failures = 0

    for path in paths:
        with LogContext(logger, path=str(path)):
            media_type = detect_media_type(path, label=label_override, detector=detector)
        if media_type is None:
            failures += 1
        _emit({'path': str(path), 'media_type': media_type})

    return 1 if failures else 0


def show_config_command(config: FingerprinterConfig) -> int:
    """Print the effective configuration as TOML."""
    print(toml.dumps(config.model_dump(exclude_none=True)), end='')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compute file checksums, sparse checksums and media types"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    full = subparsers.add_parser("full", help="Full-file checksum and media type")
    full.add_argument("paths", nargs="+", type=Path)
    full.add_argument("--label", help="Logical filename used for type detection")

    sparse = subparsers.add_parser("sparse", help="Sampled checksum for quick comparison")
    sparse.add_argument("paths", nargs="+", type=Path)
    sparse.add_argument("--window-size", type=_positive_int, help="Bytes read per window (overrides config)")
    sparse.add_argument("--max-windows", type=_positive_int, help="Maximum number of windows (overrides config)")
    sparse.add_argument("--min-stride", type=_positive_int, help="Minimum distance between windows (overrides config)")

    mime = subparsers.add_parser("mime", help="Media type only")
    mime.add_argument("paths", nargs="+", type=Path)
    mime.add_argument("--label", help="Logical filename used for type detection")

    subparsers.add_parser("show-config", help="Print the effective configuration")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the fileprint command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    loader = ConfigLoader(
        app_name=APP_NAME,
        config_class=FingerprinterConfig
    )
    config = loader.load(defaults_path=args.config)

    setup_logging(config.logging, level_override=args.log_level)

    if args.command == "full":
        return full_command(config, args.paths, label_override=args.label)
    if args.command == "sparse":
        return sparse_command(
            config,
            args.paths,
            window_size_override=args.window_size,
            max_windows_override=args.max_windows,
            min_stride_override=args.min_stride,
        )
    if args.command == "mime":
        return mime_command(config, args.paths, label_override=args.label)
    return show_config_command(config)


if __name__ == "__main__":
    sys.exit(main())
