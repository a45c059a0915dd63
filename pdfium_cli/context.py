"""Per-invocation state shared by the commands."""

from __future__ import annotations

import logging
import sys
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, ContextManager, Optional, TypeVar

from .backends import PdfiumBackend
from .backends.base import PDFBackend
from .streams import DEFAULT_DELIMITER, StdinDocumentReader, StdoutArtifactWriter

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RunContext:
    """Holds the engine, the std streams and the cleanup stack of one run.

    Every resource acquired during the run registers its release on the
    context's :class:`~contextlib.ExitStack`; leaving the context releases
    them in reverse order, whatever the exit path.
    """

    password: Optional[str] = None
    delimiter: str = DEFAULT_DELIMITER
    stdin: Optional[BinaryIO] = None
    stdout: Optional[BinaryIO] = None
    backend_factory: Callable[[], PDFBackend] = PdfiumBackend
    _backend: Optional[PDFBackend] = field(default=None, init=False, repr=False)
    _reader: Optional[StdinDocumentReader] = field(default=None, init=False, repr=False)
    _writer: Optional[StdoutArtifactWriter] = field(default=None, init=False, repr=False)
    _stack: ExitStack = field(default_factory=ExitStack, init=False, repr=False)

    @property
    def backend(self) -> PDFBackend:
        if self._backend is None:
            self._backend = self.backend_factory()
            self._stack.callback(self._backend.close)
            LOGGER.debug("Loaded PDF engine %s", type(self._backend).__name__)
        return self._backend

    @property
    def stdin_documents(self) -> StdinDocumentReader:
        if self._reader is None:
            stream = self.stdin if self.stdin is not None else sys.stdin.buffer
            self._reader = StdinDocumentReader(stream, self.delimiter)
        return self._reader

    @property
    def artifact_writer(self) -> StdoutArtifactWriter:
        if self._writer is None:
            stream = self.stdout if self.stdout is not None else sys.stdout.buffer
            self._writer = StdoutArtifactWriter(stream, self.delimiter)
        return self._writer

    def enter_context(self, manager: ContextManager[T]) -> T:
        return self._stack.enter_context(manager)

    def callback(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self._stack.callback(func, *args, **kwargs)

    def close(self) -> None:
        self._stack.close()

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["RunContext"]
