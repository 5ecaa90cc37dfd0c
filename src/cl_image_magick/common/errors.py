"""Exceptions raised by the ImageMagick adapter."""

from collections.abc import Sequence


class MagickError(Exception):
    """Base class for all errors raised by cl_image_magick."""


class EngineNotFoundError(MagickError):
    """Raised when the image engine executable cannot be found in PATH."""


class EngineCommandError(MagickError):
    """Raised when an engine invocation fails to start or exits with an error."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: int | None,
        stderr: str = "",
        message: str = "Image engine command failed",
    ):
        self.command: list[str] = list(args)
        self.returncode: int | None = returncode
        self.stderr: str = stderr
        super().__init__(
            "\n".join(
                [
                    f"{message} (exit status {returncode})",
                    stderr.strip(),
                    " ".join(self.command),
                ]
            )
        )


class EngineTimeoutError(MagickError):
    """Raised when an engine invocation exceeds the configured timeout."""

    def __init__(self, args: Sequence[str], timeout: float):
        self.command: list[str] = list(args)
        self.timeout: float = timeout
        super().__init__(f"Image engine timed out after {timeout}s: {' '.join(self.command)}")


class EngineOutputError(MagickError):
    """Raised when engine output cannot be parsed."""


class MetricParseError(EngineOutputError):
    """Raised when the comparison metric printed by the engine is not a number."""

    def __init__(self, text: str):
        self.text: str = text
        super().__init__(f"Could not parse comparison metric: {text.strip()!r}")


class ImageDimensionsError(MagickError):
    """Raised when the dimensions of a source image cannot be determined."""

    def __init__(self, path: str):
        self.path: str = path
        super().__init__(f"Could not find image dimensions: {path}")
