"""
Raw CD sector layouts and first-sector format detection.

Structure of the supported layouts:

    Mode 1 (2352): Sync (12), Address (3), Mode (1), Data (2048), ECC (288)
    Mode 2 (2352): Sync (12), Address (3), Mode (1), Subheader (8), Data (2048), ECC (280)
    Mode 2 (2336): Subheader (8), Data (2048), ECC (280)

Mode 2/2336 is Mode 2/2352 with the sync, address and mode fields removed,
so the presence of the sync pattern decides the sector size and the mode
field decides the header size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import (
    ReadError,
    SeekError,
    SourceOpenError,
    UnsupportedModeError,
    describe_os_error,
)

logger = logging.getLogger(__name__)

SYNC_PATTERN = bytes([0x00] + [0xFF] * 10 + [0x00])
SYNC_SIZE = len(SYNC_PATTERN)
ADDRESS_SIZE = 3
MODE_OFFSET = SYNC_SIZE + ADDRESS_SIZE  # 15
RAW_HEADER_SIZE = MODE_OFFSET + 1
SUBHEADER_SIZE = 8
PROBE_SIZE = RAW_HEADER_SIZE

USER_DATA_SIZE = 2048
RAW_SECTOR_SIZE = 2352
MODE2_FORM_SECTOR_SIZE = 2336


@dataclass(frozen=True)
class SectorGeometry:
    sector_size: int
    header_size: int
    expected_mode: Optional[int]

    def __post_init__(self) -> None:
        if self.header_size + USER_DATA_SIZE > self.sector_size:
            raise ValueError(
                f"header of {self.header_size} bytes leaves no room for "
                f"{USER_DATA_SIZE} bytes of user data in a {self.sector_size}-byte sector"
            )

    @property
    def name(self) -> str:
        mode = 2 if self.expected_mode is None else self.expected_mode
        return f"Mode-{mode}/{self.sector_size}"

    @property
    def payload_slice(self) -> slice:
        return slice(self.header_size, self.header_size + USER_DATA_SIZE)

    def sector_mode(self, sector: bytes) -> Optional[int]:
        """Return the mode byte of ``sector``, or None for headerless layouts."""
        if self.expected_mode is None:
            return None
        return sector[MODE_OFFSET]


MODE1_2352 = SectorGeometry(RAW_SECTOR_SIZE, RAW_HEADER_SIZE, 1)
MODE2_2352 = SectorGeometry(RAW_SECTOR_SIZE, RAW_HEADER_SIZE + SUBHEADER_SIZE, 2)
MODE2_2336 = SectorGeometry(MODE2_FORM_SECTOR_SIZE, SUBHEADER_SIZE, None)

RAW_LAYOUTS = {1: MODE1_2352, 2: MODE2_2352}


def has_sync(data: bytes) -> bool:
    return data[:SYNC_SIZE] == SYNC_PATTERN


def detect(probe: bytes) -> SectorGeometry:
    """
    Identify the sector layout from the first bytes of an image.

    ``probe`` must hold at least the first 16 bytes of the image. Without a
    sync pattern the image is taken to be headerless Mode 2/2336 and byte 15
    is ignored. With a sync pattern the mode byte selects Mode 1 or Mode 2
    raw sectors; any other mode is unsupported.
    """
    if len(probe) < PROBE_SIZE:
        raise ReadError(
            f"Read error: image is shorter than the {PROBE_SIZE}-byte sector header"
        )

    if not has_sync(probe):
        return MODE2_2336

    mode = probe[MODE_OFFSET]
    try:
        return RAW_LAYOUTS[mode]
    except KeyError:
        raise UnsupportedModeError(mode) from None


def read_probe(handle: BinaryIO) -> bytes:
    try:
        handle.seek(0)
    except OSError as exc:
        raise SeekError(f"Seek error: {describe_os_error(exc)}") from exc
    try:
        return handle.read(PROBE_SIZE)
    except OSError as exc:
        raise ReadError(f"Read error: {describe_os_error(exc)}") from exc


def detect_stream(handle: BinaryIO) -> SectorGeometry:
    geometry = detect(read_probe(handle))
    logger.info(
        "Detected %s image (sector %d bytes, header %d bytes)",
        geometry.name,
        geometry.sector_size,
        geometry.header_size,
    )
    return geometry


def open_source(path: Path | str) -> BinaryIO:
    try:
        return Path(path).open("rb")
    except OSError as exc:
        raise SourceOpenError("Source file does not exist") from exc


def detect_file(path: Path | str) -> SectorGeometry:
    with open_source(path) as handle:
        return detect_stream(handle)


__all__ = [
    "SYNC_PATTERN",
    "MODE_OFFSET",
    "PROBE_SIZE",
    "USER_DATA_SIZE",
    "SectorGeometry",
    "MODE1_2352",
    "MODE2_2352",
    "MODE2_2336",
    "has_sync",
    "detect",
    "read_probe",
    "open_source",
    "detect_stream",
    "detect_file",
]
