"""Subprocess driver for the ImageMagick / GraphicsMagick command line.

The engine must be installed separately and available in PATH:
https://imagemagick.org/ (or http://www.graphicsmagick.org/).
"""

import asyncio
import shutil
from collections.abc import Iterable, Sequence
from os import PathLike

from loguru import logger

from ..common.errors import (
    EngineCommandError,
    EngineNotFoundError,
    EngineOutputError,
    EngineTimeoutError,
)
from ..common.schemas import CommandResult, ImageInfo, MagickConfig, Size
from .image_handle import ImageHandle

IDENTIFY_FORMAT = "%m|%w|%h\\n"


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill and reap a process that has not exited yet."""
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass
    _ = await process.wait()


class MagickDriver:
    """Runs engine commands as asyncio subprocesses.

    Command resolution:
        - ImageMagick 7: `magick`, `magick identify`, `magick compare`
        - ImageMagick 6: `convert`, `identify`, `compare`
        - GraphicsMagick: `gm convert`, `gm identify`; comparison still needs
          an ImageMagick `compare` since the metric output differs.
    """

    def __init__(self, config: MagickConfig | None = None) -> None:
        self.config: MagickConfig = config or MagickConfig()
        self.backend: str
        self.convert_command: list[str]
        self.identify_command: list[str]
        self._compare_command: list[str] | None

        if self.config.image_magick:
            self._resolve_imagemagick()
        else:
            self._resolve_graphicsmagick()

        logger.debug(
            f"Image engine: {self.backend} (convert={self.convert_command}, "
            f"identify={self.identify_command}, compare={self._compare_command})"
        )

    # ------------------------------------------------------------------
    # Command resolution
    # ------------------------------------------------------------------

    def _resolve_imagemagick(self) -> None:
        magick = shutil.which(self.config.binary or "magick")
        if magick:
            self.backend = "imagemagick:magick"
            self.convert_command = [magick]
            self.identify_command = [magick, "identify"]
            self._compare_command = [magick, "compare"]
            return

        if self.config.binary:
            raise EngineNotFoundError(f"{self.config.binary} is not installed or not found in PATH.")

        convert = shutil.which("convert")
        identify = shutil.which("identify")
        if not (convert and identify):
            raise EngineNotFoundError(
                "ImageMagick is not installed or not found in PATH "
                "(need `magick` or both `convert` and `identify`)."
            )
        compare = shutil.which("compare")
        self.backend = "imagemagick:convert"
        self.convert_command = [convert]
        self.identify_command = [identify]
        self._compare_command = [compare] if compare else None

    def _resolve_graphicsmagick(self) -> None:
        gm = shutil.which(self.config.binary or "gm")
        if not gm:
            raise EngineNotFoundError("GraphicsMagick is not installed or not found in PATH.")
        self.backend = "graphicsmagick"
        self.convert_command = [gm, "convert"]
        self.identify_command = [gm, "identify"]

        magick = shutil.which("magick")
        compare = shutil.which("compare")
        if magick:
            self._compare_command = [magick, "compare"]
        elif compare:
            self._compare_command = [compare]
        else:
            self._compare_command = None

    @property
    def compare_command(self) -> list[str]:
        if self._compare_command is None:
            raise EngineNotFoundError("ImageMagick `compare` is not installed or not found in PATH.")
        return self._compare_command

    # ------------------------------------------------------------------
    # Process execution
    # ------------------------------------------------------------------

    async def run(self, args: Sequence[str], accept: Iterable[int] = (0,)) -> CommandResult:
        """
        Run one engine command and capture its output.

        Args:
            args: Full command line, executable first
            accept: Exit statuses treated as success

        Raises:
            EngineCommandError: If the process cannot start or exits with another status
            EngineTimeoutError: If the configured timeout expires
        """
        command = [str(arg) for arg in args]
        logger.debug(" ".join(command))

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            raise EngineCommandError(command, None, str(exc), "Failed to start image engine") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.config.timeout
            )
        except TimeoutError as exc:
            await _terminate(process)
            logger.error(f"Image engine timed out: {' '.join(command)}")
            raise EngineTimeoutError(command, self.config.timeout or 0) from exc
        except BaseException:
            # Cancelled from outside (e.g. a caller's own timeout)
            await _terminate(process)
            raise

        returncode = process.returncode if process.returncode is not None else -1
        if returncode not in tuple(accept):
            message = stderr.decode(errors="replace")
            logger.error(f"Image engine failed with status {returncode}: {message.strip()}")
            raise EngineCommandError(command, returncode, message)

        return CommandResult(args=command, returncode=returncode, stdout=stdout, stderr=stderr)

    # ------------------------------------------------------------------
    # Engine operations
    # ------------------------------------------------------------------

    def image(self, src: str | PathLike[str] | None = None) -> ImageHandle:
        return ImageHandle(self, src)

    def blank(self, width: int, height: int, color: str = "white") -> ImageHandle:
        return ImageHandle.blank(self, width, height, color)

    async def identify(self, src: str | PathLike[str]) -> ImageInfo:
        """Format and dimensions of the first frame of src."""
        result = await self.run(
            [*self.identify_command, "-ping", "-format", IDENTIFY_FORMAT, str(src)]
        )
        text = result.stdout.decode(errors="replace").strip()
        if not text:
            raise EngineOutputError(f"Empty identify output for {src}")

        # Multi-frame images print one record per frame
        parts = text.splitlines()[0].split("|")
        if len(parts) < 3:
            raise EngineOutputError(f"Unexpected identify output for {src}: {text!r}")
        try:
            width = int(parts[1])
            height = int(parts[2])
        except ValueError as exc:
            raise EngineOutputError(f"Unexpected identify output for {src}: {text!r}") from exc

        return ImageInfo(format=parts[0].strip(), width=width, height=height)

    async def size(self, src: str | PathLike[str]) -> Size:
        info = await self.identify(src)
        return Size(width=info.width or 0, height=info.height or 0)

    async def compare(
        self,
        src1: str | PathLike[str],
        src2: str | PathLike[str],
        *,
        metric: str = "AE",
        fuzz: float = 0.0,
        diff: str | PathLike[str] | None = None,
    ) -> str:
        """
        Run the pixel comparison and return the metric text the engine prints on stderr.

        `compare` exits with 1 when the images differ; only higher statuses are errors.
        """
        args = [
            *self.compare_command,
            "-metric",
            metric,
            "-fuzz",
            f"{fuzz:g}%",
            str(src1),
            str(src2),
            str(diff) if diff else "null:",
        ]
        result = await self.run(args, accept=(0, 1))
        return result.stderr.decode(errors="replace")
