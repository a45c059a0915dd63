"""
Custom exceptions for pdfium-cli.

Every exception carries the process exit code it maps to, so the CLI can
translate a failure into an exit status in a single place.
"""

from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Process exit codes."""

    PDFIUM_UNKNOWN_ERROR = 1
    PDFIUM_FILE_ERROR = 2
    PDFIUM_BAD_FILE_ERROR = 3
    PDFIUM_PASSWORD_ERROR = 4
    PDFIUM_SECURITY_ERROR = 5
    PDFIUM_PAGE_ERROR = 6
    PDFIUM_ERROR = 7
    INVALID_ARGUMENTS = 8
    INVALID_INPUT = 9
    INVALID_OUTPUT = 10
    INVALID_PAGE_RANGE = 11
    EXPERIMENTAL = 12


class EngineErrorKind(IntEnum):
    """Failure classes reported by the PDF engine (``FPDF_ERR_*``)."""

    UNKNOWN = 1
    FILE = 2
    BAD_FILE = 3
    PASSWORD = 4
    SECURITY = 5
    PAGE = 6

    @classmethod
    def from_code(cls, code: Optional[int]) -> Optional["EngineErrorKind"]:
        try:
            return cls(code)
        except ValueError:
            return None


_KIND_EXIT_CODES = {
    EngineErrorKind.UNKNOWN: ExitCode.PDFIUM_UNKNOWN_ERROR,
    EngineErrorKind.FILE: ExitCode.PDFIUM_FILE_ERROR,
    EngineErrorKind.BAD_FILE: ExitCode.PDFIUM_BAD_FILE_ERROR,
    EngineErrorKind.PASSWORD: ExitCode.PDFIUM_PASSWORD_ERROR,
    EngineErrorKind.SECURITY: ExitCode.PDFIUM_SECURITY_ERROR,
    EngineErrorKind.PAGE: ExitCode.PDFIUM_PAGE_ERROR,
}


class PdfiumCliError(Exception):
    """Base exception for all pdfium-cli errors."""

    exit_code: ExitCode = ExitCode.PDFIUM_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown pdfium-cli error occurred."


class InvalidArgumentsError(PdfiumCliError):
    """Raised when command line arguments are inconsistent."""

    exit_code = ExitCode.INVALID_ARGUMENTS

    @property
    def default_message(self) -> str:
        return "Invalid arguments."


class InvalidInputError(PdfiumCliError):
    """Raised when an input file or stream cannot be read."""

    exit_code = ExitCode.INVALID_INPUT

    @property
    def default_message(self) -> str:
        return "Invalid input."


class InvalidOutputError(PdfiumCliError):
    """Raised when a destination cannot be created or written."""

    exit_code = ExitCode.INVALID_OUTPUT

    @property
    def default_message(self) -> str:
        return "Invalid output."


class PageRangeError(PdfiumCliError):
    """Raised when a page range expression cannot be resolved."""

    exit_code = ExitCode.INVALID_PAGE_RANGE

    @property
    def default_message(self) -> str:
        return "Invalid page range expression."


class MalformedTermError(PageRangeError):
    """Raised when a term has more than one hyphen."""

    @property
    def default_message(self) -> str:
        return "a page range must contain 1 or 2 components"


class InvalidTokenError(PageRangeError):
    """Raised when a token is neither a keyword nor an integer."""

    @property
    def default_message(self) -> str:
        return "not a valid page number"


class OutOfBoundsPageError(PageRangeError):
    """Raised when a resolved page lies outside the document."""

    def __init__(self, page: int, page_count: int) -> None:
        self.page = page
        self.page_count = page_count
        super().__init__(
            f"{page} is not a valid page number, the document has {page_count} page(s)"
        )


class InvertedRangeError(PageRangeError):
    """Raised when an interval ends before it starts."""

    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        super().__init__(
            f"page range {start}-{end} ends before it starts"
        )


class EmptyResultError(PageRangeError):
    """Raised when no page survives resolution."""

    @property
    def default_message(self) -> str:
        return "no valid pages resulted from the expression"


class EngineError(PdfiumCliError):
    """Raised when the PDF engine reports a failure.

    ``kind`` is the engine's own failure class; ``None`` means the engine
    failed without telling us why.
    """

    def __init__(self, message: str = "", kind: Optional[EngineErrorKind] = None) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def exit_code(self) -> ExitCode:  # type: ignore[override]
        if self.kind is None:
            return ExitCode.PDFIUM_ERROR
        return _KIND_EXIT_CODES[self.kind]

    @property
    def default_message(self) -> str:
        return "The PDF engine reported an error."


class FeatureUnavailableError(PdfiumCliError):
    """Raised when the installed engine build lacks an optional capability."""

    exit_code = ExitCode.EXPERIMENTAL

    @property
    def default_message(self) -> str:
        return "This feature is not available in the installed pdfium build."
