"""Per-page export operations: render, explode, flatten, images and thumbnails."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .backends import BackendDocument
from .context import RunContext
from .imaging import DEFAULT_JPEG_QUALITY, MAX_FILE_SIZE, encode_image, extension_for
from .utils import (
    STD_FILENAME,
    ensure_output_folder,
    is_std_stream,
    page_output_path,
    require_page_placeholder,
    write_file,
)

LOGGER = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]

DEFAULT_DPI = 200


def _safe_name(name: str, fallback: str) -> str:
    # Embedded names must not escape the output folder.
    cleaned = Path(name.replace("\\", "/")).name
    return cleaned if cleaned not in ("", ".", "..") else fallback


class _Emitter:
    """Route artifacts to files, or through the delimited stdout writer."""

    def __init__(self, context: RunContext, status_callback: Optional[StatusCallback]) -> None:
        self.context = context
        self.status_callback = status_callback

    def emit(self, payload: bytes, destination: Optional[Path], status: str) -> str:
        if destination is None:
            self.context.artifact_writer.write(payload)
            return STD_FILENAME

        write_file(destination, payload)
        if self.status_callback:
            self.status_callback(status.format(destination=destination))
        return str(destination)


class PageExporter:
    """Export the selected pages of an opened document.

    ``pages`` are the resolved 1-based page numbers. Every method returns the
    destinations it wrote, ``"-"`` standing for an artifact sent to stdout.
    """

    def __init__(
        self,
        context: RunContext,
        document: BackendDocument,
        pages: Sequence[int],
        status_callback: Optional[StatusCallback] = None,
    ) -> None:
        self.context = context
        self.document = document
        self.pages = list(pages)
        self._emitter = _Emitter(context, status_callback)

    def _page_destination(self, output: str, page: int) -> Optional[Path]:
        return None if is_std_stream(output) else page_output_path(output, page)

    @staticmethod
    def _folder(output_folder: str) -> Optional[Path]:
        return None if is_std_stream(output_folder) else ensure_output_folder(output_folder)

    def render(
        self,
        output: str,
        *,
        dpi: int = DEFAULT_DPI,
        file_type: str = "jpeg",
        quality: int = DEFAULT_JPEG_QUALITY,
        max_file_size: Optional[int] = MAX_FILE_SIZE,
    ) -> List[str]:
        """Rasterize every selected page into an image."""

        require_page_placeholder(output)
        created: List[str] = []
        for page in self.pages:
            image = self.document.render_page(page - 1, dpi)
            try:
                payload = encode_image(image, file_type, quality, max_file_size)
            finally:
                image.close()
            created.append(
                self._emitter.emit(
                    payload,
                    self._page_destination(output, page),
                    f"Rendered page {page} into {{destination}}",
                )
            )
        LOGGER.info("Rendered %d page(s) of %s", len(created), self.document.name)
        return created

    def explode(self, output: str) -> List[str]:
        """Write every selected page into its own PDF."""

        require_page_placeholder(output)
        backend = self.context.backend
        created: List[str] = []
        for page in self.pages:
            writer = backend.new_writer()
            self.document.import_pages(writer, [page])
            created.append(
                self._emitter.emit(
                    backend.serialize(writer),
                    self._page_destination(output, page),
                    f"Exploded page {page} into {{destination}}",
                )
            )
        LOGGER.info("Exploded %d page(s) of %s", len(created), self.document.name)
        return created

    def flatten(self, output: str) -> str:
        """Flatten the selected pages and save the whole document."""

        flattened = 0
        for page in self.pages:
            if self.document.flatten_page(page - 1):
                flattened += 1
            else:
                LOGGER.debug("Nothing to flatten on page %d", page)

        destination = None if is_std_stream(output) else Path(output)
        LOGGER.info("Flattened %d of %d page(s) of %s", flattened, len(self.pages), self.document.name)
        return self._emitter.emit(
            self.document.save(),
            destination,
            "Flattened {destination}",
        )

    def images(
        self,
        output_folder: str,
        *,
        file_type: str = "jpeg",
        quality: int = DEFAULT_JPEG_QUALITY,
    ) -> List[str]:
        """Export the image objects of every selected page."""

        folder = self._folder(output_folder)
        extension = extension_for(file_type)
        created: List[str] = []
        for page in self.pages:
            for number, image in self.document.page_images(page - 1):
                try:
                    payload = encode_image(image, file_type, quality)
                finally:
                    image.close()
                destination = folder / f"page-{page}-image-{number}.{extension}" if folder else None
                created.append(
                    self._emitter.emit(
                        payload,
                        destination,
                        f"Exported image {number} from page {page} into {{destination}}",
                    )
                )
        return created

    def thumbnails(
        self,
        output_folder: str,
        *,
        file_type: str = "jpeg",
        quality: int = DEFAULT_JPEG_QUALITY,
    ) -> List[str]:
        """Export the embedded thumbnails; pages without one are skipped."""

        folder = self._folder(output_folder)
        extension = extension_for(file_type)
        created: List[str] = []
        for page in self.pages:
            image = self.document.page_thumbnail(page - 1)
            if image is None:
                LOGGER.debug("Page %d of %s has no thumbnail", page, self.document.name)
                continue
            try:
                payload = encode_image(image, file_type, quality)
            finally:
                image.close()
            destination = folder / f"thumbnail-page-{page}.{extension}" if folder else None
            created.append(
                self._emitter.emit(
                    payload,
                    destination,
                    f"Exported thumbnail from page {page} into {{destination}}",
                )
            )
        return created


def export_attachments(
    context: RunContext,
    document: BackendDocument,
    output_folder: str,
    status_callback: Optional[StatusCallback] = None,
) -> List[str]:
    """Write every embedded file of ``document``."""

    folder = None if is_std_stream(output_folder) else ensure_output_folder(output_folder)
    emitter = _Emitter(context, status_callback)
    created: List[str] = []
    for number, attachment in enumerate(document.attachments(), start=1):
        name = _safe_name(attachment.name, f"attachment-{number}")
        created.append(
            emitter.emit(
                attachment.content,
                folder / name if folder else None,
                f"Exported attachment {number} into {{destination}}",
            )
        )
    return created


def export_javascripts(
    context: RunContext,
    document: BackendDocument,
    output_folder: str,
    status_callback: Optional[StatusCallback] = None,
) -> List[str]:
    """Write every document-level JavaScript action as ``<name>.js``."""

    folder = None if is_std_stream(output_folder) else ensure_output_folder(output_folder)
    emitter = _Emitter(context, status_callback)
    created: List[str] = []
    for number, action in enumerate(document.javascripts(), start=1):
        name = _safe_name(action.name, f"javascript-{number}")
        created.append(
            emitter.emit(
                action.script.encode("utf-8"),
                folder / f"{name}.js" if folder else None,
                f"Exported javascript {number} into {{destination}}",
            )
        )
    return created


__all__ = ["DEFAULT_DPI", "PageExporter", "export_attachments", "export_javascripts"]
