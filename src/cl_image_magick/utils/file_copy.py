"""Async byte-stream copy used when an image passes through untransformed."""

from os import PathLike
from typing import Final

import aiofiles
from loguru import logger

CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MB


async def copy_file(source: str | PathLike[str], target: str | PathLike[str]) -> None:
    """
    Copy source to target byte for byte.

    Read and write errors propagate to the caller; the target directory must
    already exist.
    """
    logger.debug(f"Copying {source} -> {target}")
    async with aiofiles.open(source, "rb") as rd, aiofiles.open(target, "wb") as wr:
        while True:
            chunk = await rd.read(CHUNK_SIZE)
            if not chunk:
                break
            _ = await wr.write(chunk)
