"""Shared schemas and errors."""

from .errors import (
    EngineCommandError,
    EngineNotFoundError,
    EngineOutputError,
    EngineTimeoutError,
    ImageDimensionsError,
    MagickError,
    MetricParseError,
)
from .schemas import (
    CommandResult,
    CompareOptions,
    CompareResult,
    CropOptions,
    DestSize,
    ImageInfo,
    MagickConfig,
    ResizeOptions,
    Size,
)

__all__ = [
    "CommandResult",
    "CompareOptions",
    "CompareResult",
    "CropOptions",
    "DestSize",
    "EngineCommandError",
    "EngineNotFoundError",
    "EngineOutputError",
    "EngineTimeoutError",
    "ImageDimensionsError",
    "ImageInfo",
    "MagickConfig",
    "MagickError",
    "MetricParseError",
    "ResizeOptions",
    "Size",
]
