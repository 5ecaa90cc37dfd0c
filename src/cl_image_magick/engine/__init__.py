from .image_handle import ImageHandle
from .instance import get_driver, shutdown_driver
from .magick import MagickDriver

__all__ = [
    "ImageHandle",
    "MagickDriver",
    "get_driver",
    "shutdown_driver",
]
