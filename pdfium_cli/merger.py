"""Merging several documents into one."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from .context import RunContext
from .document import DocumentSource
from .exceptions import InvalidArgumentsError
from .utils import STD_FILENAME, is_std_stream, write_file

LOGGER = logging.getLogger(__name__)


def merge_documents(
    context: RunContext,
    inputs: Sequence[str],
    output: str,
    status_callback: Optional[Callable[[str], None]] = None,
) -> str:
    """Append all pages of ``inputs``, in order, into a single PDF.

    Every ``"-"`` in ``inputs`` consumes the next document on stdin.

    Returns:
        The path written, or ``"-"`` when the result went to stdout.
    """

    if len(inputs) < 2:
        raise InvalidArgumentsError("merge needs at least two input documents")

    source = DocumentSource(context)
    backend = context.backend
    writer = backend.new_writer()

    merged_pages = 0
    for selector in inputs:
        with source.open(selector) as document:
            document.import_pages(writer, range(1, document.page_count + 1))
            merged_pages += document.page_count
            LOGGER.debug("Imported %d page(s) from %s", document.page_count, document.name)

    payload = backend.serialize(writer)
    if is_std_stream(output):
        context.artifact_writer.write(payload)
        return STD_FILENAME

    destination = write_file(Path(output), payload)
    if status_callback:
        status_callback(f"Merged {len(inputs)} documents ({merged_pages} pages) into {destination}")
    return str(destination)


__all__ = ["merge_documents"]
