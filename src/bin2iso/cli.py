"""Command line front end: ``bin2iso image.bin [image.iso]``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from . import __version__
from .convert import convert_image, image_size
from .errors import Bin2IsoError
from .sector import detect_file

BIN_SUFFIX = ".bin"
ISO_SUFFIX = ".iso"


def default_destination(source: str) -> str:
    """Swap a trailing ``.bin`` for ``.iso``, otherwise append ``.iso``."""
    if len(source) > len(BIN_SUFFIX) and source.endswith(BIN_SUFFIX):
        return source[: -len(BIN_SUFFIX)] + ISO_SUFFIX
    return source + ISO_SUFFIX


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return f"{record.levelname.lower()}: {record.getMessage()}"


def configure_logging(verbosity: int) -> None:
    if verbosity > 0:
        level = logging.INFO
    elif verbosity < 0:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_LowercaseLevelFormatter())
    package_logger = logging.getLogger("bin2iso")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level)


class _UsageParser(argparse.ArgumentParser):
    """Reports bad invocations with the bare one-line usage string."""

    def error(self, message: str) -> None:
        self.exit(2, f"usage: {self.usage}\n")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="bin2iso",
        usage="bin2iso image.bin [image.iso]",
        description=(
            "Convert a raw Mode 1/2352, Mode 2/2352 or Mode 2/2336 BIN image "
            "to a 2048 bytes/sector ISO image"
        ),
        epilog="Use -- before an image name that starts with a dash.",
    )
    parser.add_argument("source", help="Input BIN image")
    parser.add_argument(
        "destination",
        nargs="?",
        default=None,
        help="Output ISO image (default: source with .bin replaced by .iso)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of dropping a trailing partial sector",
    )
    parser.add_argument(
        "--detect-only",
        action="store_true",
        help="Report the detected sector layout and exit without writing",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Log detection and summary"
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only report fatal errors"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _report_layout(source: Path) -> None:
    geometry = detect_file(source)
    with source.open("rb") as handle:
        size = image_size(handle)
    sectors, tail = divmod(size, geometry.sector_size)
    print(f"{source}: {geometry.name}")
    print(f"  sector size: {geometry.sector_size}")
    print(f"  header size: {geometry.header_size}")
    print(f"  sectors: {sectors}")
    if tail:
        print(f"  trailing bytes: {tail}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(1 if args.verbose else -1 if args.quiet else 0)

    try:
        if args.detect_only:
            _report_layout(Path(args.source))
            return 0
        destination = args.destination or default_destination(args.source)
        convert_image(args.source, destination, strict=args.strict)
    except Bin2IsoError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


__all__ = ["main", "build_arg_parser", "default_destination", "configure_logging"]
