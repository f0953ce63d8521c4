"""Fatal error types raised while converting an image."""

from __future__ import annotations


class Bin2IsoError(Exception):
    """Base class for conditions that abort a conversion run."""


class UnsupportedModeError(Bin2IsoError):
    def __init__(self, mode: int) -> None:
        super().__init__(f"Unsupported track mode {mode}")
        self.mode = mode


class SourceOpenError(Bin2IsoError):
    pass


class DestinationOpenError(Bin2IsoError):
    pass


class ReadError(Bin2IsoError):
    pass


class WriteError(Bin2IsoError):
    pass


class SeekError(Bin2IsoError):
    pass


class TruncatedImageError(Bin2IsoError):
    """Raised in strict mode when the image ends with a partial sector."""


def describe_os_error(exc: OSError) -> str:
    return exc.strerror or str(exc)


__all__ = [
    "Bin2IsoError",
    "UnsupportedModeError",
    "SourceOpenError",
    "DestinationOpenError",
    "ReadError",
    "WriteError",
    "SeekError",
    "TruncatedImageError",
    "describe_os_error",
]
