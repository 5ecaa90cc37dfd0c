"""Test configuration and fixtures for cl_image_magick.

This module provides:
- Pytest configuration (markers, dependency checks)
- A recording driver that captures engine command lines without running them
- Function-scoped fixtures (synthetic images, SVG, corrupt files)
"""

import shutil
from collections.abc import Callable, Iterable, Iterator, Sequence
from pathlib import Path
from typing import override

import pytest
from PIL import Image, ImageDraw

from cl_image_magick.common.errors import EngineCommandError
from cl_image_magick.common.schemas import CommandResult, MagickConfig
from cl_image_magick.engine import MagickDriver, shutdown_driver

SVG_SOURCE = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="120" height="60" viewBox="0 0 120 60">
  <rect x="0" y="0" width="60" height="60" fill="#ff0000"/>
  <rect x="60" y="0" width="60" height="60" fill="#0000ff"/>
</svg>
"""


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "requires_imagemagick: requires ImageMagick to be installed",
    )


def pytest_runtest_setup(item):
    """Check dependencies before running tests - FAIL if missing (not skip)."""
    if item.get_closest_marker("requires_imagemagick") and not (
        shutil.which("magick") or (shutil.which("convert") and shutil.which("identify"))
    ):
        pytest.fail(
            "ImageMagick not installed. "
            "Install: brew install imagemagick (macOS) or apt-get install imagemagick (Linux)\n"
            "Or exclude with: pytest -m 'not requires_imagemagick'",
            pytrace=False,
        )


@pytest.fixture(autouse=True)
def reset_shared_driver() -> Iterator[None]:
    """Every test starts without a cached engine driver."""
    shutdown_driver()
    yield
    shutdown_driver()


# ============================================================================
# Recording driver
# ============================================================================


class RecordingDriver(MagickDriver):
    """MagickDriver that records command lines and answers from canned data.

    images maps a source path to the `identify` record ("PNG|200|100");
    sources not listed fail the way the engine does for unreadable files.
    """

    def __init__(self, images: dict[str, str] | None = None, metric: str = "0"):
        self.config: MagickConfig = MagickConfig()
        self.backend: str = "recording"
        self.convert_command: list[str] = ["magick"]
        self.identify_command: list[str] = ["magick", "identify"]
        self._compare_command: list[str] | None = ["magick", "compare"]
        self.images: dict[str, str] = images or {}
        self.metric: str = metric
        self.calls: list[list[str]] = []

    @override
    async def run(self, args: Sequence[str], accept: Iterable[int] = (0,)) -> CommandResult:
        command = [str(arg) for arg in args]
        self.calls.append(command)

        if command[:2] == self.identify_command:
            src = command[-1]
            if src not in self.images:
                raise EngineCommandError(command, 1, "identify: no decode delegate for this image format")
            return CommandResult(command, 0, f"{self.images[src]}\n".encode(), b"")

        if command[:2] == self._compare_command:
            return CommandResult(command, 1, b"", self.metric.encode())

        return CommandResult(command, 0, b"\x89PNG", b"")

    def convert_calls(self) -> list[list[str]]:
        return [
            c
            for c in self.calls
            if c[:2] not in (self.identify_command, self._compare_command)
        ]

    def compare_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[:2] == self._compare_command]


@pytest.fixture
def recording_driver() -> Callable[..., RecordingDriver]:
    """Factory for RecordingDriver instances."""
    return RecordingDriver


# ============================================================================
# Sample media
# ============================================================================


@pytest.fixture
def synthetic_image(tmp_path: Path) -> Path:
    """200x100 PNG: left half red, right half blue."""
    path = tmp_path / "synthetic.png"
    img = Image.new("RGB", (200, 100), color=(255, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([100, 0, 199, 99], fill=(0, 0, 255))
    img.save(path, "PNG")
    return path


@pytest.fixture
def rgba_image(tmp_path: Path) -> Path:
    """Semi-transparent 80x80 PNG."""
    path = tmp_path / "rgba.png"
    Image.new("RGBA", (80, 80), color=(0, 128, 0, 100)).save(path, "PNG")
    return path


@pytest.fixture
def svg_image(tmp_path: Path) -> Path:
    path = tmp_path / "vector.svg"
    _ = path.write_text(SVG_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def corrupt_file(tmp_path: Path) -> Path:
    path = tmp_path / "corrupt.png"
    _ = path.write_bytes(b"this is not an image at all")
    return path
