"""Backend abstractions for pdfium-cli."""

from .base import BackendDocument, PDFBackend
from .pdfium_backend import PdfiumBackend, PdfiumDocument

__all__ = [
    "BackendDocument",
    "PDFBackend",
    "PdfiumBackend",
    "PdfiumDocument",
]
