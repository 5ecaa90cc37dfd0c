"""Pydantic schemas for engine configuration, image metadata and operation options."""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, ClassVar, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ─────────────────────────────────────────────────────────────
# Policy constants
# ─────────────────────────────────────────────────────────────

JPEG_QUALITY = 90
DEFAULT_TOLERANCE = 0.05

JPEG_FORMATS = frozenset({"jpg", "jpeg"})
VECTOR_FORMATS = frozenset({"svg", "svgz", "msvg"})


def is_jpeg_format(fmt: str | None) -> bool:
    return fmt is not None and fmt.lower() in JPEG_FORMATS


def is_vector_format(fmt: str | None) -> bool:
    return fmt is not None and fmt.lower() in VECTOR_FORMATS


# ─────────────────────────────────────────────────────────────
# Engine configuration
# ─────────────────────────────────────────────────────────────


class MagickConfig(BaseModel):
    """Configuration of the engine binding.

    Attributes:
        image_magick: Use the ImageMagick command set (default). When False,
            GraphicsMagick (`gm`) is driven instead.
        binary: Explicit executable to run instead of the one found in PATH.
        timeout: Seconds before an engine invocation is killed. None disables it.
    """

    image_magick: bool = Field(default=True, description="Prefer the ImageMagick command set")
    binary: str | None = Field(default=None, description="Override engine executable")
    timeout: float | None = Field(default=None, gt=0, description="Per-invocation timeout")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")


# ─────────────────────────────────────────────────────────────
# Image metadata
# ─────────────────────────────────────────────────────────────


class Size(BaseModel):
    """Pixel dimensions of an image."""

    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class ImageInfo(BaseModel):
    """Subset of `identify` output for the first frame of an image."""

    format: str = ""
    width: int | None = None
    height: int | None = None

    @property
    def size(self) -> Size | None:
        if not self.width or not self.height:
            return None
        return Size(width=self.width, height=self.height)

    @property
    def is_vector(self) -> bool:
        return is_vector_format(self.format)


# ─────────────────────────────────────────────────────────────
# Operation options
# ─────────────────────────────────────────────────────────────


class CropOptions(BaseModel):
    """Options for crop().

    x/y are the crop origin used when `resize` is False and the base for
    deriving a missing width/height. `trim` removes uniform borders afterwards.
    """

    x: int = 0
    y: int = 0
    resize: bool = True
    trim: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")

    @field_validator("x", "y", mode="before")
    @classmethod
    def falsy_offset_is_zero(cls, v: Any) -> Any:
        return v or 0


class ResizeOptions(BaseModel):
    """Options for resize().

    `upsize` allows enlarging beyond the source resolution, `extend` pads the
    result to exactly the requested size with the content centred.
    """

    upsize: bool = False
    extend: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")


class CompareOptions(BaseModel):
    """Options for compare()."""

    diff: str | Path | None = Field(default=None, description="Path for the diff image")
    tolerance: float = Field(default=DEFAULT_TOLERANCE, ge=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")


class DestSize(BaseModel):
    """Requested destination size plus operation options.

    A missing (None or 0) dimension is derived from the source.
    """

    width: int | None = None
    height: int | None = None
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("width", "height", mode="before")
    @classmethod
    def zero_is_missing(cls, v: Any) -> Any:
        return v or None

    @field_validator("options", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return v or {}

    @classmethod
    def coerce(cls, value: "DestSize | Sequence[Any] | Mapping[str, Any]") -> "DestSize":
        """Build a DestSize from a model, a (width, height[, options]) sequence or a mapping."""
        if isinstance(value, DestSize):
            return value
        if isinstance(value, Mapping):
            return cls.model_validate(value)
        if isinstance(value, (str, bytes)) or len(value) < 2:
            raise ValueError(f"Destination size must be (width, height[, options]), got {value!r}")
        options = value[2] if len(value) > 2 else None
        return cls(width=value[0], height=value[1], options=options)


# ─────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────


class CompareResult(NamedTuple):
    """Outcome of compare(); unpacks as (is_equal, equality)."""

    is_equal: bool
    equality: float


class CommandResult(NamedTuple):
    """Captured output of a single engine invocation."""

    args: list[str]
    returncode: int
    stdout: bytes
    stderr: bytes
