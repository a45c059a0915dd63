"""Utility functions shared by the commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .exceptions import InvalidArgumentsError, InvalidOutputError

LOGGER = logging.getLogger(__name__)

STD_FILENAME = "-"
PAGE_PLACEHOLDER = "%d"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbosity: int = 0) -> None:
    """Send log records to stderr; stdout is reserved for artifacts.

    ``verbosity`` 0 logs warnings, 1 adds info and 2 or more adds debug.
    """

    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr, force=True)


def is_std_stream(name: Optional[str]) -> bool:
    return name == STD_FILENAME


def require_page_placeholder(output: str) -> str:
    """Validate that a per-page output template can tell pages apart."""

    if not is_std_stream(output) and PAGE_PLACEHOLDER not in output:
        raise InvalidArgumentsError(f"output string {output} should contain page pattern %d")
    return output


def page_output_path(template: str, page: int) -> Path:
    """Substitute every ``%d`` in ``template`` with ``page``."""

    return Path(template.replace(PAGE_PLACEHOLDER, str(page)))


def ensure_output_folder(folder: Union[str, Path]) -> Path:
    """Return ``folder`` as a path after checking it is an existing directory."""

    path = Path(folder)
    if not path.exists():
        raise InvalidOutputError(f"output folder {folder} does not exist")
    if not path.is_dir():
        raise InvalidOutputError(f"output folder {folder} is not a directory")
    return path


def write_file(path: Union[str, Path], payload: bytes) -> Path:
    path = Path(path)
    try:
        with path.open("wb") as handle:
            handle.write(payload)
    except OSError as exc:
        raise InvalidOutputError(f"could not write {path}: {exc}") from exc
    LOGGER.debug("Wrote %s (%s)", path, format_file_size(len(payload)))
    return path


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500.0 B")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


__all__ = [
    "STD_FILENAME",
    "configure_logging",
    "is_std_stream",
    "require_page_placeholder",
    "page_output_path",
    "ensure_output_folder",
    "write_file",
    "format_file_size",
]
