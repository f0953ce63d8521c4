from __future__ import annotations

import importlib.util
import logging
import sys
from pathlib import Path
from typing import Iterable

import pytest


def repo_src_path() -> Path:
    """Return the repository's ``src`` directory."""

    return Path(__file__).resolve().parents[1] / "src"


def _ensure_repo_on_path() -> None:
    if importlib.util.find_spec("bin2iso") is None:
        sys.path.insert(0, str(repo_src_path()))


_ensure_repo_on_path()

SYNC = bytes([0x00] + [0xFF] * 10 + [0x00])


def raw_sector(layout: str, index: int, mode: int | None = None) -> bytes:
    """Build one synthetic sector whose user data is ``index % 256`` repeated."""

    payload = bytes([index % 256]) * 2048
    if layout == "mode2_2336":
        return b"\x11" * 8 + payload + b"\xee" * 280
    if layout == "mode1_2352":
        mode = 1 if mode is None else mode
        header = SYNC + bytes([0x00, 0x02, index % 75, mode])
        return header + payload + b"\xee" * 288
    if layout == "mode2_2352":
        mode = 2 if mode is None else mode
        header = SYNC + bytes([0x00, 0x02, index % 75, mode]) + b"\x11" * 8
        return header + payload + b"\xee" * 280
    raise ValueError(f"unknown layout {layout}")


def build_image(
    path: Path,
    layout: str,
    count: int,
    *,
    mode_overrides: dict[int, int] | None = None,
    tail: bytes = b"",
) -> Path:
    overrides = mode_overrides or {}
    with path.open("wb") as handle:
        for index in range(count):
            handle.write(raw_sector(layout, index, overrides.get(index)))
        handle.write(tail)
    return path


def expected_iso(indices: Iterable[int]) -> bytes:
    return b"".join(bytes([i % 256]) * 2048 for i in indices)


@pytest.fixture
def image_factory(tmp_path: Path):
    def _factory(layout: str, count: int, name: str = "track.bin", **kwargs) -> Path:
        return build_image(tmp_path / name, layout, count, **kwargs)

    return _factory


@pytest.fixture(autouse=True)
def _reset_package_logger():
    logger = logging.getLogger("bin2iso")
    yield
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
