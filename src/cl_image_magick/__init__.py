"""cl_image_magick - ImageMagick backed image resize / crop / compare for media pipelines."""

from .backend import (
    BACKEND_TYPE,
    ImageMagickBackend,
    compare,
    crop,
    driver,
    init,
    parse_metric,
    resample,
    resize,
    size,
)
from .common.errors import (
    EngineCommandError,
    EngineNotFoundError,
    EngineOutputError,
    EngineTimeoutError,
    ImageDimensionsError,
    MagickError,
    MetricParseError,
)
from .common.schemas import (
    CompareOptions,
    CompareResult,
    CropOptions,
    DestSize,
    ImageInfo,
    MagickConfig,
    ResizeOptions,
    Size,
)
from .engine import ImageHandle, MagickDriver, get_driver, shutdown_driver

__version__ = "0.1.0"

# Backend tag used by hosts choosing among image backends
type = BACKEND_TYPE

__all__ = [
    "BACKEND_TYPE",
    "CompareOptions",
    "CompareResult",
    "CropOptions",
    "DestSize",
    "EngineCommandError",
    "EngineNotFoundError",
    "EngineOutputError",
    "EngineTimeoutError",
    "ImageDimensionsError",
    "ImageHandle",
    "ImageInfo",
    "ImageMagickBackend",
    "MagickConfig",
    "MagickDriver",
    "MagickError",
    "MetricParseError",
    "ResizeOptions",
    "Size",
    "__version__",
    "compare",
    "crop",
    "driver",
    "get_driver",
    "init",
    "parse_metric",
    "resample",
    "resize",
    "shutdown_driver",
    "size",
]
