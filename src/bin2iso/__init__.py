"""
Top-level package for raw CD image conversion.

Converts single-track BIN images in Mode 1/2352, Mode 2/2352 or Mode 2/2336
layout into plain 2048 bytes/sector ISO images.
"""

from .convert import ConversionResult, CopyStats, convert_image, copy
from .errors import (
    Bin2IsoError,
    DestinationOpenError,
    ReadError,
    SeekError,
    SourceOpenError,
    TruncatedImageError,
    UnsupportedModeError,
    WriteError,
)
from .sector import (
    MODE1_2352,
    MODE2_2336,
    MODE2_2352,
    MODE_OFFSET,
    SYNC_PATTERN,
    USER_DATA_SIZE,
    SectorGeometry,
    detect,
    detect_file,
)

__all__ = [
    "__version__",
    "SectorGeometry",
    "MODE1_2352",
    "MODE2_2352",
    "MODE2_2336",
    "MODE_OFFSET",
    "SYNC_PATTERN",
    "USER_DATA_SIZE",
    "detect",
    "detect_file",
    "copy",
    "convert_image",
    "ConversionResult",
    "CopyStats",
    "Bin2IsoError",
    "UnsupportedModeError",
    "SourceOpenError",
    "DestinationOpenError",
    "ReadError",
    "WriteError",
    "SeekError",
    "TruncatedImageError",
]

__version__ = "1.0.0"
