"""Opening documents from file paths or from the stdin stream."""

from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Callable, Iterator, Tuple

from .backends import BackendDocument
from .context import RunContext
from .exceptions import InvalidInputError
from .utils import is_std_stream

LOGGER = logging.getLogger(__name__)

Release = Callable[[], None]


class DocumentSource:
    """Open the document named by a selector: a path, or ``-`` for stdin."""

    def __init__(self, context: RunContext) -> None:
        self.context = context
        self._stdin_documents = 0

    def _read(self, selector: str) -> Tuple[bytes, str]:
        if is_std_stream(selector):
            data = self.context.stdin_documents.next_document()
            if data is None:
                raise InvalidInputError("no more documents on stdin")
            self._stdin_documents += 1
            return data, f"stdin document {self._stdin_documents}"

        path = Path(selector)
        if not path.is_file():
            raise InvalidInputError(f"could not open input file {selector}: no such file")
        try:
            with path.open("rb") as handle:
                return handle.read(), str(path)
        except OSError as exc:
            raise InvalidInputError(f"could not open input file {selector}: {exc}") from exc

    def open_next(self, selector: str) -> Tuple[BackendDocument, Release]:
        """Open a document and return it with its idempotent release function."""

        data, name = self._read(selector)
        document = self.context.backend.open(data, name=name, password=self.context.password)
        LOGGER.info("Opened %s", name)

        stack = ExitStack()
        stack.callback(document.close)
        return document, stack.close

    @contextmanager
    def open(self, selector: str) -> Iterator[BackendDocument]:
        document, release = self.open_next(selector)
        try:
            yield document
        finally:
            release()


__all__ = ["DocumentSource"]
