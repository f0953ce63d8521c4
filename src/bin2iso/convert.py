"""Sector-by-sector stripping of raw images down to 2048-byte user data."""

from __future__ import annotations

import contextlib
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, List

from .errors import (
    DestinationOpenError,
    ReadError,
    SeekError,
    TruncatedImageError,
    WriteError,
    describe_os_error,
)
from .sector import USER_DATA_SIZE, SectorGeometry, detect_stream, open_source

logger = logging.getLogger(__name__)


@dataclass
class CopyStats:
    sectors_written: int = 0
    dropped_bytes: int = 0
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


@dataclass
class ConversionResult:
    source: Path
    destination: Path
    geometry: SectorGeometry
    sectors_written: int
    dropped_bytes: int
    warnings: List[str]

    @property
    def bytes_written(self) -> int:
        return self.sectors_written * USER_DATA_SIZE


def _seek(handle: BinaryIO, offset: int, whence: int = io.SEEK_SET) -> int:
    try:
        return handle.seek(offset, whence)
    except OSError as exc:
        raise SeekError(f"Seek error: {describe_os_error(exc)}") from exc


def _read_sector(handle: BinaryIO, size: int) -> bytes:
    try:
        data = handle.read(size)
    except OSError as exc:
        raise ReadError(f"Read error: {describe_os_error(exc)}") from exc
    if data is None or len(data) != size:
        got = 0 if data is None else len(data)
        raise ReadError(f"Read error: short read ({got} of {size} bytes)")
    return data


def _write_payload(handle: BinaryIO, payload: bytes) -> None:
    try:
        written = handle.write(payload)
    except OSError as exc:
        raise WriteError(f"Write error: {describe_os_error(exc)}") from exc
    if written is not None and written != len(payload):
        raise WriteError(f"Write error: short write ({written} of {len(payload)} bytes)")


def image_size(handle: BinaryIO) -> int:
    try:
        size = _seek(handle, 0, io.SEEK_END)
    except SeekError as exc:
        raise SeekError("Cannot determine source file size") from exc
    if size is None or size < 0:
        raise SeekError("Cannot determine source file size")
    return size


def copy(
    source: BinaryIO,
    destination: BinaryIO,
    geometry: SectorGeometry,
    *,
    strict: bool = False,
) -> CopyStats:
    """
    Stream every whole sector of ``source`` into ``destination``.

    Only the user data of each sector is written, using the header size of
    ``geometry`` for every sector. A sector whose mode byte disagrees with
    the detected mode is still copied and reported as a warning. Trailing
    bytes that do not fill a whole sector are dropped with a warning, or
    rejected when ``strict`` is set.
    """
    stats = CopyStats()
    sector_size = geometry.sector_size

    total_size = image_size(source)
    tail = total_size % sector_size
    if tail:
        if strict:
            raise TruncatedImageError(
                f"Image size is not a factor of sector size {sector_size} "
                f"({tail} trailing bytes)"
            )
        stats.dropped_bytes = tail
        stats.warn(
            f"Image size is not a factor of sector size {sector_size}, "
            f"last {tail} bytes will be dropped"
        )
    sector_count = total_size // sector_size
    _seek(source, 0)

    payload = geometry.payload_slice
    for index in range(sector_count):
        sector = _read_sector(source, sector_size)
        mode = geometry.sector_mode(sector)
        if mode is not None and mode != geometry.expected_mode:
            stats.warn(
                f"Sector {index} has different mode "
                f"({mode} instead of {geometry.expected_mode})"
            )
        _write_payload(destination, sector[payload])
        stats.sectors_written += 1

    try:
        destination.flush()
    except OSError as exc:
        raise WriteError(f"Write error: {describe_os_error(exc)}") from exc
    return stats


@contextlib.contextmanager
def _open_destination(path: Path) -> Iterator[BinaryIO]:
    try:
        handle = path.open("wb")
    except OSError as exc:
        raise DestinationOpenError("Cannot write to destination file") from exc
    try:
        yield handle
    finally:
        # close flushes whatever the buffer still holds
        try:
            handle.close()
        except OSError as exc:
            raise WriteError(f"Write error: {describe_os_error(exc)}") from exc


def convert_image(
    source_path: Path | str,
    destination_path: Path | str,
    *,
    strict: bool = False,
) -> ConversionResult:
    """
    Convert a raw BIN image at ``source_path`` into an ISO image.

    The destination is only opened once the layout has been detected, so an
    unsupported image leaves it untouched. A failure during the copy leaves
    whatever was already written on disk.
    """
    source_path = Path(source_path)
    destination_path = Path(destination_path)

    with open_source(source_path) as source:
        geometry = detect_stream(source)
        with _open_destination(destination_path) as destination:
            stats = copy(source, destination, geometry, strict=strict)

    result = ConversionResult(
        source=source_path,
        destination=destination_path,
        geometry=geometry,
        sectors_written=stats.sectors_written,
        dropped_bytes=stats.dropped_bytes,
        warnings=stats.warnings,
    )
    logger.info(
        "Wrote %d sectors (%d bytes) to %s, %d warning(s)",
        result.sectors_written,
        result.bytes_written,
        destination_path,
        len(result.warnings),
    )
    return result


__all__ = ["CopyStats", "ConversionResult", "copy", "convert_image", "image_size"]
