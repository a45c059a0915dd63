"""Delimited multi-document streams on stdin and stdout.

Several whole PDFs can be piped into one command by concatenating them with
``"\\n" + delimiter + "\\n"`` between them. Commands that produce several
artifacts while writing to stdout use the same separator. The delimiter is
neither escaped nor detected inside payloads, so it must never occur in the
raw bytes of a document.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import BinaryIO, Deque, Iterator, List, Optional

from .exceptions import InvalidInputError, InvalidOutputError

LOGGER = logging.getLogger(__name__)

DEFAULT_DELIMITER = "--pdfium-cli-file-boundary"


def separator_for(delimiter: str) -> bytes:
    """Return the byte sequence placed between two documents."""

    return b"\n" + delimiter.encode("utf-8") + b"\n"


def split_stream(data: bytes, delimiter: str) -> List[bytes]:
    """Split a concatenated stream into its documents."""

    if not data:
        return []
    return data.split(separator_for(delimiter))


class StdinDocumentReader:
    """Hand out the documents of a delimited input stream one at a time.

    The whole stream is read on first use: the engine needs the size of a
    document up front to seek in it, so documents cannot be streamed.
    """

    def __init__(self, stream: BinaryIO, delimiter: str = DEFAULT_DELIMITER) -> None:
        self.stream = stream
        self.delimiter = delimiter
        self._documents: Optional[Deque[bytes]] = None

    def _load(self) -> Deque[bytes]:
        if self._documents is None:
            try:
                data = self.stream.read()
            except OSError as exc:
                raise InvalidInputError(f"could not read documents from stdin: {exc}") from exc
            self._documents = deque(split_stream(data, self.delimiter))
            LOGGER.debug("Read %d document(s) from stdin", len(self._documents))
        return self._documents

    @property
    def remaining(self) -> int:
        return len(self._load())

    def next_document(self) -> Optional[bytes]:
        """Return the next document, or ``None`` once the stream is exhausted."""

        documents = self._load()
        if not documents:
            return None
        return documents.popleft()

    def __iter__(self) -> Iterator[bytes]:
        while True:
            document = self.next_document()
            if document is None:
                return
            yield document


class StdoutArtifactWriter:
    """Write artifacts to a single output stream, delimited from each other."""

    def __init__(self, stream: BinaryIO, delimiter: str = DEFAULT_DELIMITER) -> None:
        self.stream = stream
        self.delimiter = delimiter
        self.written = 0

    def write_next(self, payload: bytes, index: int) -> None:
        """Write ``payload``; any artifact but the first is preceded by the separator."""

        try:
            if index > 0:
                self.stream.write(separator_for(self.delimiter))
            self.stream.write(payload)
            self.stream.flush()
        except OSError as exc:
            raise InvalidOutputError(f"could not write artifact {index + 1} to stdout: {exc}") from exc
        self.written = max(self.written, index + 1)

    def write(self, payload: bytes) -> None:
        self.write_next(payload, self.written)


__all__ = [
    "DEFAULT_DELIMITER",
    "separator_for",
    "split_stream",
    "StdinDocumentReader",
    "StdoutArtifactWriter",
]
