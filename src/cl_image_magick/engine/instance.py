from loguru import logger

from ..common.schemas import MagickConfig
from .magick import MagickDriver

_driver: MagickDriver | None = None
_driver_config: MagickConfig | None = None


def get_driver(config: MagickConfig | None = None) -> MagickDriver:
    """Get or create the process-wide engine driver.

    Args:
        config: Engine configuration. None reuses the current driver, or
                builds one preferring the ImageMagick command set.

    Returns:
        The shared MagickDriver; rebuilt when config differs from the current one.

    Raises:
        EngineNotFoundError: If the engine executables are not in PATH.
    """
    global _driver, _driver_config

    if _driver is not None and (config is None or config == _driver_config):
        return _driver

    desired_config = config or MagickConfig()
    if _driver is not None:
        logger.debug(f"Rebuilding image engine driver for {desired_config!r}")

    _driver = MagickDriver(desired_config)
    _driver_config = desired_config
    return _driver


def shutdown_driver() -> None:
    """Drop the shared driver; the next get_driver() call builds a new one."""
    global _driver, _driver_config
    _driver = None
    _driver_config = None
