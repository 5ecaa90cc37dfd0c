"""Pure geometry helpers for crop and resize argument marshalling."""

import math
from typing import NamedTuple


class CropBox(NamedTuple):
    """Outer resize box and the centred crop rectangle inside it."""

    outer_width: int
    outer_height: int
    crop_width: int
    crop_height: int
    x: int
    y: int


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def resolve_crop_size(
    src_width: int,
    src_height: int,
    width: int | None,
    height: int | None,
    x: int = 0,
    y: int = 0,
) -> tuple[int, int]:
    """Fill a missing crop dimension with the space left from the offset to the source edge."""
    return (width or (src_width - x), height or (src_height - y))


def crop_box(src_width: int, src_height: int, crop_width: int, crop_height: int) -> CropBox:
    """
    Compute the box the source must be resized to so that a centred
    crop_width x crop_height rectangle is completely covered by content.

    The dimension that is proportionally larger in the source is grown, the
    other matches the crop exactly.

    Raises:
        ValueError: If any dimension is not positive
    """
    if min(src_width, src_height, crop_width, crop_height) <= 0:
        raise ValueError(
            f"Invalid crop geometry: source {src_width}x{src_height}, crop {crop_width}x{crop_height}"
        )

    outer_width = crop_width
    outer_height = crop_height
    if (src_width / crop_width) > (src_height / crop_height):
        outer_width = round_half_up(src_width * (crop_height / src_height))
    else:
        outer_height = round_half_up(src_height * (crop_width / src_width))

    return CropBox(
        outer_width=outer_width,
        outer_height=outer_height,
        crop_width=crop_width,
        crop_height=crop_height,
        x=(outer_width - crop_width) // 2,
        y=(outer_height - crop_height) // 2,
    )


def fit_dimensions(
    src_width: int,
    src_height: int,
    width: int | None,
    height: int | None,
) -> tuple[int, int]:
    """Derive a missing target dimension from the source aspect ratio."""
    if width and height:
        return (width, height)
    if width:
        return (width, max(1, round_half_up(src_height * width / src_width)))
    if height:
        return (max(1, round_half_up(src_width * height / src_height)), height)
    return (src_width, src_height)


def vector_density(width: int | None, height: int | None) -> int | None:
    """Rasterization density for a vector source rendered at the requested size."""
    candidates = [d for d in (width, height) if d]
    return max(candidates) if candidates else None


def geometry(width: int | None, height: int | None, option: str = "") -> str:
    """Format an engine geometry string: `WxH`, `W`, `xH`, with an optional flag such as `>`."""
    if width and height:
        value = f"{width}x{height}"
    elif width:
        value = f"{width}"
    elif height:
        value = f"x{height}"
    else:
        raise ValueError("Geometry requires a width or a height")
    return value + option


def offset_geometry(width: int, height: int, x: int = 0, y: int = 0) -> str:
    """Format `WxH+X+Y` (negative offsets keep their sign)."""
    return f"{width}x{height}{x:+d}{y:+d}"
