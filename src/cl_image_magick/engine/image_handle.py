"""Chainable image handle: a source plus the directives applied when it is written."""

from os import PathLike
from typing import TYPE_CHECKING, Self

from ..common.schemas import CommandResult
from ..utils.geometry import geometry, offset_geometry

if TYPE_CHECKING:
    from .magick import MagickDriver


class ImageHandle:
    """
    Collects transform directives for one source image.

    Directives are emitted in call order. Input options (density, size) are
    placed before the source so the engine applies them while reading it.
    A handle is consumed by a single write() or to_bytes() call.

    Usage:
        await driver.image("in.png").quality(90).resize(200, 100, ">").write("out.jpg")
    """

    def __init__(self, driver: "MagickDriver", src: str | PathLike[str] | None = None):
        self._driver: "MagickDriver" = driver
        self.src: str | None = str(src) if src is not None else None
        self.format: str | None = None
        self._in_args: list[str] = []
        self._out_args: list[str] = []

    @classmethod
    def blank(cls, driver: "MagickDriver", width: int, height: int, color: str) -> Self:
        """Synthesize a solid-colour canvas instead of reading a file."""
        handle = cls(driver, f"xc:{color}")
        handle._in_args += ["-size", f"{width}x{height}"]
        return handle

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def density(self, value: int) -> Self:
        self._in_args += ["-density", str(value)]
        return self

    def set_format(self, fmt: str) -> Self:
        self.format = fmt
        return self

    def flatten(self) -> Self:
        self._out_args.append("-flatten")
        return self

    def quality(self, value: int) -> Self:
        self._out_args += ["-quality", str(value)]
        return self

    def auto_orient(self) -> Self:
        self._out_args.append("-auto-orient")
        return self

    def repage(self, width: int = 0, height: int = 0, x: int = 0, y: int = 0) -> Self:
        self._out_args += ["-repage", offset_geometry(width, height, x, y)]
        return self

    def no_profile(self) -> Self:
        self._out_args += ["+profile", "*"]
        return self

    def resize(self, width: int | None, height: int | None, option: str = "") -> Self:
        self._out_args += ["-resize", geometry(width, height, option)]
        return self

    def crop(self, width: int, height: int, x: int = 0, y: int = 0) -> Self:
        self._out_args += ["-crop", offset_geometry(width, height, x, y)]
        return self

    def trim(self) -> Self:
        self._out_args.append("-trim")
        return self

    def gravity(self, value: str) -> Self:
        self._out_args += ["-gravity", value]
        return self

    def extent(self, width: int, height: int) -> Self:
        self._out_args += ["-extent", f"{width}x{height}"]
        return self

    # ------------------------------------------------------------------
    # Terminal calls
    # ------------------------------------------------------------------

    def args(self, dest: str | PathLike[str]) -> list[str]:
        """Arguments following the convert command for writing to dest."""
        if self.src is None:
            raise ValueError("Image handle has no source")
        target = f"{self.format}:{dest}" if self.format else str(dest)
        return [*self._in_args, self.src, *self._out_args, target]

    async def write(self, dest: str | PathLike[str]) -> CommandResult:
        return await self._driver.run([*self._driver.convert_command, *self.args(dest)])

    async def to_bytes(self, fmt: str | None = None) -> bytes:
        """Encode to stdout and return the encoded bytes."""
        if fmt:
            self.format = fmt
        result = await self.write("-")
        return result.stdout
