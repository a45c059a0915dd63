"""Backend protocol for PDF engine operations."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Protocol, Tuple

from PIL import Image

from ..types import (
    Attachment,
    FormField,
    JavaScriptAction,
    Permissions,
    PixelPositions,
    Signature,
    StructuredPageText,
)


class BackendDocument(Protocol):
    """An opened PDF document. Page indexes are 0-based."""

    name: str

    @property
    def page_count(self) -> int: ...

    @property
    def version(self) -> Optional[int]: ...

    def page_size(self, index: int) -> Tuple[float, float]: ...

    def page_label(self, index: int) -> str: ...

    def render_page(self, index: int, dpi: int) -> Image.Image:
        """Rasterize a page at ``dpi``."""

    def page_images(self, index: int) -> Iterator[Tuple[int, Image.Image]]:
        """Yield ``(object_number, image)`` for every image object on a page.

        ``object_number`` is the 1-based position among all page objects.
        """

    def page_thumbnail(self, index: int) -> Optional[Image.Image]:
        """Return the embedded thumbnail of a page, if it has one."""

    def flatten_page(self, index: int) -> bool:
        """Flatten annotations and form fields into page content.

        Returns ``False`` when there was nothing to flatten.
        """

    def save(self) -> bytes:
        """Serialize the document including in-place modifications."""

    def page_text(self, index: int) -> str: ...

    def page_text_structured(
        self,
        index: int,
        *,
        collect_font_information: bool = False,
        pixel_positions: Optional[PixelPositions] = None,
    ) -> StructuredPageText: ...

    def import_pages(self, writer: object, page_numbers: Iterable[int]) -> None:
        """Append 1-based ``page_numbers`` to a writer from :meth:`PDFBackend.new_writer`."""

    def metadata(self) -> List[Tuple[str, str]]: ...

    def permissions(self) -> Permissions: ...

    def security_handler_revision(self) -> int: ...

    def signatures(self) -> List[Signature]: ...

    def attachments(self) -> List[Attachment]: ...

    def javascripts(self) -> List[JavaScriptAction]: ...

    def form_fields(self) -> List[FormField]: ...

    def close(self) -> None: ...


class PDFBackend(Protocol):
    """Protocol defining the engine operations used by the commands."""

    def open(self, data: bytes, *, name: str, password: str | None = None) -> BackendDocument:
        """Open a document from its raw bytes."""

    def new_writer(self) -> object:
        """Return an empty document to import pages into."""

    def serialize(self, writer: object) -> bytes:
        """Return the bytes of a writer created by :meth:`new_writer`."""

    def close(self) -> None:
        """Release the engine and any document still open."""
