"""
pdfium-cli - Render, split, merge and inspect PDF files with PDFium.

This library provides the building blocks of the ``pdfium-cli`` command:
page range resolution, the delimited stdin/stdout protocol used to pipe
several documents through one invocation, and the per-command operations.

Quick Start:
    >>> from pdfium_cli import resolve_page_range
    >>> resolve_page_range(5, "2-last")
    [2, 3, 4, 5]

Main Classes:
    - RunContext: Per-invocation state (engine, streams, cleanup)
    - DocumentSource: Open a file path or the next stdin document
    - PageExporter: render, explode, flatten, images and thumbnails

Exceptions:
    - PdfiumCliError: Base exception, carries the process exit code
    - PageRangeError: Invalid page range expression
    - EngineError: Failure reported by the PDF engine

For CLI usage, use the 'pdfium-cli' command after installation.
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Core classes
from pdfium_cli.context import RunContext
from pdfium_cli.document import DocumentSource
from pdfium_cli.exporter import PageExporter, export_attachments, export_javascripts
from pdfium_cli.merger import merge_documents

# Page ranges and streams
from pdfium_cli.page_range import DEFAULT_PAGE_RANGE, format_page_range, resolve_page_range
from pdfium_cli.streams import DEFAULT_DELIMITER, StdinDocumentReader, StdoutArtifactWriter

# Exceptions
from pdfium_cli.exceptions import (
    EngineError,
    EngineErrorKind,
    ExitCode,
    FeatureUnavailableError,
    InvalidArgumentsError,
    InvalidInputError,
    InvalidOutputError,
    PageRangeError,
    PdfiumCliError,
)

__all__ = [
    # Main classes
    "RunContext",
    "DocumentSource",
    "PageExporter",
    "export_attachments",
    "export_javascripts",
    "merge_documents",
    # Page ranges and streams
    "DEFAULT_PAGE_RANGE",
    "format_page_range",
    "resolve_page_range",
    "DEFAULT_DELIMITER",
    "StdinDocumentReader",
    "StdoutArtifactWriter",
    # Exceptions
    "EngineError",
    "EngineErrorKind",
    "ExitCode",
    "FeatureUnavailableError",
    "InvalidArgumentsError",
    "InvalidInputError",
    "InvalidOutputError",
    "PageRangeError",
    "PdfiumCliError",
    # Version info
    "__version__",
]
