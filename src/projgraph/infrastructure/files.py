"""Utilities for reading and writing graph files."""

import logging
import os
from typing import Optional, Union

import aiofiles

from ..core.enums import GraphFormat
from ..core.exceptions import StorageError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

FORMAT_SUFFIXES = {
    ".json": GraphFormat.JSON,
    ".graphml": GraphFormat.GRAPHML,
    ".xml": GraphFormat.GRAPHML,
    ".dot": GraphFormat.DOT,
    ".gv": GraphFormat.DOT,
    ".gexf": GraphFormat.GEXF,
    ".svg": GraphFormat.SVG,
    ".png": GraphFormat.PNG,
    ".pdf": GraphFormat.PDF,
    ".csv": GraphFormat.CSV,
}


def format_from_path(file_path: PathLike, default: Optional[GraphFormat] = None) -> GraphFormat:
    """
    Guess a graph format from a file extension.

    Raises:
        UnsupportedFormatError: If the extension is unknown and no default is given
    """
    suffix = os.path.splitext(os.fspath(file_path))[1].lower()
    graph_format = FORMAT_SUFFIXES.get(suffix, default)
    if graph_format is None:
        raise UnsupportedFormatError(f"Cannot infer graph format from {os.fspath(file_path)!r}")
    return graph_format


async def read_text(file_path: PathLike) -> str:
    """
    Read a UTF-8 text file.

    Raises:
        StorageError: If the file cannot be read
    """
    try:
        async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
            content = await f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to load from %s: %s", file_path, e)
        raise StorageError(f"Failed to load from {file_path}: {e}") from e
    logger.debug("Read %d characters from %s", len(content), file_path)
    return content


async def write_text(file_path: PathLike, content: str) -> None:
    """
    Write a UTF-8 text file, replacing it atomically.

    Raises:
        StorageError: If the file cannot be written
    """
    path = os.fspath(file_path)
    temp_path = f"{path}.tmp"
    try:
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(content)
        os.replace(temp_path, path)
    except OSError as e:
        logger.error("Failed to save to %s: %s", path, e)
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise StorageError(f"Failed to save to {path}: {e}") from e
    logger.debug("Wrote %d characters to %s", len(content), path)
