"""ImageMagick-backed image operations: resample, resize, crop, size and compare.

Every operation inspects its source, builds one directive chain and hands it
to the engine. All pixel work happens in the engine; this module only decides
which directives to emit.
"""

import re
from collections.abc import Mapping, Sequence
from os import PathLike
from pathlib import Path
from typing import Any, ClassVar

from loguru import logger

from .common.errors import ImageDimensionsError, MetricParseError
from .common.schemas import (
    JPEG_QUALITY,
    CompareOptions,
    CompareResult,
    CropOptions,
    DestSize,
    MagickConfig,
    ResizeOptions,
    Size,
    is_jpeg_format,
    is_vector_format,
)
from .engine.image_handle import ImageHandle
from .engine.instance import get_driver
from .engine.magick import MagickDriver
from .utils.file_copy import copy_file
from .utils.geometry import crop_box, fit_dimensions, resolve_crop_size, vector_density

BACKEND_TYPE = "cl-image-magick"

StrPath = str | PathLike[str]
DestSizeLike = DestSize | Sequence[Any] | Mapping[str, Any]

_METRIC_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_metric(text: str) -> float:
    """
    Read the leading number of the metric text printed by `compare`.

    Newer ImageMagick releases append a normalized value in parentheses
    (`"1234 (0.0188)"`); only the leading absolute value is used.

    Raises:
        MetricParseError: If the text does not start with a number
    """
    match = _METRIC_RE.match(text)
    if not match:
        raise MetricParseError(text)
    return float(match.group(1))


def _same_path(a: StrPath, b: StrPath) -> bool:
    return Path(a).resolve() == Path(b).resolve()


class ImageMagickBackend:
    """Image operations driven through the ImageMagick command line.

    Hosts that support several image backends select among them by `type`.
    Without an explicit driver the shared driver from get_driver() is used.
    """

    type: ClassVar[str] = BACKEND_TYPE

    def __init__(self, driver: MagickDriver | None = None, config: MagickConfig | None = None):
        self._driver: MagickDriver | None = driver
        self._config: MagickConfig | None = config

    @property
    def driver(self) -> MagickDriver:
        if self._driver is not None:
            return self._driver
        return get_driver(self._config)

    def _apply_format(self, img: ImageHandle, fmt: str | None) -> None:
        if not fmt:
            return
        img.set_format(fmt)
        # JPEG has no alpha channel
        if is_jpeg_format(fmt):
            img.flatten()

    async def init(self) -> None:
        """Check the engine works by encoding a small synthetic image in memory."""
        _ = await self.driver.blank(100, 100, "white").to_bytes("PNG")

    async def size(self, src: StrPath) -> Size:
        return await self.driver.size(src)

    async def resample(self, src: StrPath, dest: StrPath, format: str | None = None) -> None:
        """Re-encode src to dest, optionally converting format."""
        driver = self.driver
        _ = await driver.size(src)

        img = driver.image(src)
        self._apply_format(img, format)
        _ = await img.quality(JPEG_QUALITY).auto_orient().repage(0, 0, 0, 0).no_profile().write(dest)

    async def crop(
        self,
        src: StrPath,
        dest: StrPath,
        destsize: DestSizeLike,
        format: str | None = None,
    ) -> None:
        """
        Crop src to the requested size.

        By default the source is scaled so the crop rectangle is filled with
        content and then cropped from the centre. With `resize=False` the
        literal rectangle at (x, y) is cut out without scaling.

        Raises:
            ImageDimensionsError: If the source dimensions cannot be determined
        """
        driver = self.driver
        requested = DestSize.coerce(destsize)
        options = CropOptions.model_validate(requested.options)

        info = await driver.identify(src)
        src_size = info.size
        if src_size is None:
            raise ImageDimensionsError(str(src))

        width, height = resolve_crop_size(
            src_size.width,
            src_size.height,
            requested.width,
            requested.height,
            options.x,
            options.y,
        )
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Crop {width}x{height}+{options.x}+{options.y} lies outside "
                f"{src_size.width}x{src_size.height} source {src}"
            )

        img = driver.image(src)
        if info.is_vector:
            img.density(max(width, height))

        self._apply_format(img, format)
        img.quality(JPEG_QUALITY).auto_orient()

        if options.resize:
            box = crop_box(src_size.width, src_size.height, width, height)
            # "^" keeps engine rounding from leaving the outer box a pixel short
            img.resize(box.outer_width, box.outer_height, "^")
            img.crop(box.crop_width, box.crop_height, box.x, box.y)
        else:
            img.crop(width, height, options.x, options.y)

        if options.trim:
            img.trim()

        _ = await img.repage(0, 0, 0, 0).no_profile().write(dest)

    async def resize(
        self,
        src: StrPath,
        dest: StrPath,
        destsize: DestSizeLike,
        format: str | None = None,
    ) -> None:
        """
        Fit src within the requested size.

        The image is only shrunk unless `upsize` is set. `extend` pads the
        result to exactly the requested size, centred. Vector sources that
        stay vector are passed through untouched.
        """
        driver = self.driver
        requested = DestSize.coerce(destsize)
        options = ResizeOptions.model_validate(requested.options)

        info = await driver.identify(src)
        img = driver.image(src)

        if info.is_vector:
            if (not format or is_vector_format(format)) and not options.extend:
                if _same_path(src, dest):
                    logger.debug(f"Vector source {src} passed through in place")
                    return
                await copy_file(src, dest)
                return

            density = vector_density(requested.width, requested.height)
            if density:
                img.density(density)

        self._apply_format(img, format)
        img.quality(JPEG_QUALITY).auto_orient()

        if requested.width or requested.height:
            img.resize(requested.width, requested.height, "" if options.upsize else ">")

        if options.extend:
            src_size = info.size
            if src_size is None:
                raise ImageDimensionsError(str(src))
            width, height = fit_dimensions(
                src_size.width, src_size.height, requested.width, requested.height
            )
            img.gravity("Center").extent(width, height)

        _ = await img.no_profile().write(dest)

    async def compare(
        self,
        src1: StrPath,
        src2: StrPath,
        options: CompareOptions | Mapping[str, Any] | None = None,
    ) -> CompareResult:
        """
        Compare two images pixel by pixel.

        Returns:
            CompareResult(is_equal, equality). `equality` is the absolute error
            count reported by the engine, or 0 when the sizes differ and no diff
            image was requested.
        """
        opts = (
            options
            if isinstance(options, CompareOptions)
            else CompareOptions.model_validate(options or {})
        )
        driver = self.driver

        size1 = await driver.size(src1)
        size2 = await driver.size(src2)

        is_equal = True
        equality = 1.0
        if size1.width != size2.width or size1.height != size2.height:
            logger.warning(
                f"Image sizes differ: {src1} is {size1.width}x{size1.height}, "
                f"{src2} is {size2.width}x{size2.height}"
            )
            is_equal = False
            equality = 0.0

        if not opts.diff and not is_equal:
            return CompareResult(is_equal, equality)

        if opts.diff and not _same_path(src2, opts.diff):
            await copy_file(src2, opts.diff)

        text = await driver.compare(
            src1,
            src2,
            metric="AE",
            fuzz=opts.tolerance * 100,
            diff=opts.diff,
        )
        equality = parse_metric(text)
        if is_equal:
            is_equal = equality < opts.tolerance
        return CompareResult(is_equal, equality)


_default_backend = ImageMagickBackend()


def driver() -> MagickDriver:
    """Raw engine driver for callers that need directives beyond these operations."""
    return _default_backend.driver


async def init() -> None:
    await _default_backend.init()


async def size(src: StrPath) -> Size:
    return await _default_backend.size(src)


async def resample(src: StrPath, dest: StrPath, format: str | None = None) -> None:
    await _default_backend.resample(src, dest, format)


async def crop(
    src: StrPath, dest: StrPath, destsize: DestSizeLike, format: str | None = None
) -> None:
    await _default_backend.crop(src, dest, destsize, format)


async def resize(
    src: StrPath, dest: StrPath, destsize: DestSizeLike, format: str | None = None
) -> None:
    await _default_backend.resize(src, dest, destsize, format)


async def compare(
    src1: StrPath,
    src2: StrPath,
    options: CompareOptions | Mapping[str, Any] | None = None,
) -> CompareResult:
    return await _default_backend.compare(src1, src2, options)
