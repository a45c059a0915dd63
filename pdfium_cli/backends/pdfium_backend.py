"""pdfium backend implementation for pdfium-cli.

Rendering, page objects, flattening, text, metadata, attachments and
security information come from PDFium through ``pypdfium2``. Page import,
JavaScript and AcroForm widgets are read with ``pypdf`` from the same bytes.
"""

from __future__ import annotations

import ctypes
import io
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import pypdfium2 as pdfium
import pypdfium2.raw as pdfium_c
from PIL import Image
from pypdf import PasswordType, PdfReader, PdfWriter
from pypdf.errors import DependencyError, PyPdfError, WrongPasswordError

from ..exceptions import EngineError, EngineErrorKind, FeatureUnavailableError
from ..types import (
    Attachment,
    FormField,
    FormFieldFlags,
    JavaScriptAction,
    Permissions,
    PixelPositions,
    Signature,
    StructuredPageText,
    TextChar,
    TextFont,
    TextRect,
)
from .base import BackendDocument, PDFBackend

LOGGER = logging.getLogger(__name__)

# Field flags, PDF 32000-1:2008 tables 221, 226 and 230 (bit n is 1 << (n - 1)).
FF_READ_ONLY = 1 << 0
FF_REQUIRED = 1 << 1
FF_NO_EXPORT = 1 << 2
FF_RADIO = 1 << 15
FF_PUSHBUTTON = 1 << 16
FF_COMBO = 1 << 17


def _engine_error(message: str, exc: Exception, *, kind: Optional[EngineErrorKind] = None) -> EngineError:
    if kind is None:
        kind = EngineErrorKind.from_code(getattr(exc, "err_code", None))
    return EngineError(f"{message}: {exc}", kind=kind)


def _resolve(obj: Any) -> Any:
    return obj.get_object() if obj is not None else None


def _pdf_string(obj: Any) -> str:
    text = str(_resolve(obj))
    return text[1:] if text.startswith("/") else text


def _bit(flags: int, number: int) -> bool:
    return bool(flags & (1 << (number - 1)))


def _read_string(getter: Callable[..., int], handle: Any, *, utf16: bool = False) -> Optional[str]:
    """Call a PDFium ``Get*(handle, buffer, length)`` accessor."""

    length = getter(handle, None, 0)
    terminator = 2 if utf16 else 1
    if length <= terminator:
        return None
    buffer = ctypes.create_string_buffer(length)
    getter(handle, buffer, length)
    raw = buffer.raw[: length - terminator]
    return raw.decode("utf-16-le" if utf16 else "ascii", errors="replace")


def _pixel_box(
    scale: Tuple[float, float],
    page_height: float,
    left: float,
    top: float,
    right: float,
    bottom: float,
) -> Dict[str, int]:
    scale_x, scale_y = scale
    return {
        "left": round(left * scale_x),
        "top": round((page_height - top) * scale_y),
        "right": round(right * scale_x),
        "bottom": round((page_height - bottom) * scale_y),
    }


def _to_pil(bitmap: Any) -> Image.Image:
    try:
        return bitmap.to_pil().copy()
    finally:
        bitmap.close()


class PdfiumDocument(BackendDocument):
    """A document opened in PDFium, with a pypdf reader over the same bytes."""

    def __init__(
        self,
        *,
        name: str,
        data: bytes,
        pdf: Any,
        password: Optional[str] = None,
        on_close: Optional[Callable[["PdfiumDocument"], None]] = None,
    ) -> None:
        self.name = name
        self._data = data
        self._pdf = pdf
        self._password = password
        self._on_close = on_close
        self._reader: Optional[PdfReader] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Basic document information helpers
    # ------------------------------------------------------------------
    @property
    def page_count(self) -> int:
        return len(self._pdf)

    @property
    def version(self) -> Optional[int]:
        return self._pdf.get_version()

    @contextmanager
    def _structure(self, action: str) -> Iterator[None]:
        """Turn pypdf failures inside the block into engine errors."""

        try:
            yield
        except WrongPasswordError as exc:
            raise _engine_error(f"could not {action} {self.name}", exc, kind=EngineErrorKind.PASSWORD) from exc
        except DependencyError as exc:
            # pypdf needs the cryptography package for AES security handlers.
            raise _engine_error(f"could not {action} {self.name}", exc, kind=EngineErrorKind.SECURITY) from exc
        except PyPdfError as exc:
            raise _engine_error(f"could not {action} {self.name}", exc, kind=EngineErrorKind.BAD_FILE) from exc

    @property
    def reader(self) -> PdfReader:
        if self._reader is None:
            with self._structure("decrypt"):
                reader = PdfReader(io.BytesIO(self._data))
                if reader.is_encrypted and self._password:
                    if reader.decrypt(self._password) == PasswordType.NOT_DECRYPTED:
                        raise WrongPasswordError("wrong password")
            self._reader = reader
        return self._reader

    @contextmanager
    def _page(self, index: int) -> Iterator[Any]:
        try:
            page = self._pdf[index]
        except (IndexError, pdfium.PdfiumError) as exc:
            raise _engine_error(
                f"could not load page {index + 1} of {self.name}", exc, kind=EngineErrorKind.PAGE
            ) from exc
        try:
            yield page
        finally:
            page.close()

    def page_size(self, index: int) -> Tuple[float, float]:
        with self._page(index) as page:
            width, height = page.get_size()
        return width, height

    def page_label(self, index: int) -> str:
        return self._pdf.get_page_label(index) or ""

    # ------------------------------------------------------------------
    # Raster helpers
    # ------------------------------------------------------------------
    def render_page(self, index: int, dpi: int) -> Image.Image:
        with self._page(index) as page:
            try:
                bitmap = page.render(scale=dpi / 72)
            except pdfium.PdfiumError as exc:
                raise _engine_error(f"could not render page {index + 1} of {self.name}", exc) from exc
            return _to_pil(bitmap)

    def page_images(self, index: int) -> Iterator[Tuple[int, Image.Image]]:
        with self._page(index) as page:
            for number, page_object in enumerate(page.get_objects(max_depth=0), start=1):
                if page_object.type != pdfium_c.FPDF_PAGEOBJ_IMAGE:
                    continue
                try:
                    bitmap = page_object.get_bitmap(render=True)
                except pdfium.PdfiumError as exc:
                    raise _engine_error(
                        f"could not get image for object {number} on page {index + 1} of {self.name}", exc
                    ) from exc
                yield number, _to_pil(bitmap)

    def page_thumbnail(self, index: int) -> Optional[Image.Image]:
        get_thumbnail = getattr(pdfium_c, "FPDFPage_GetThumbnailAsBitmap", None)
        if get_thumbnail is None:
            raise FeatureUnavailableError(
                "Thumbnail support is not available in the installed pdfium build."
            )
        with self._page(index) as page:
            raw_bitmap = get_thumbnail(page.raw)
            if not raw_bitmap:
                return None
            return _to_pil(pdfium.PdfBitmap.from_raw(raw_bitmap))

    # ------------------------------------------------------------------
    # Modification helpers
    # ------------------------------------------------------------------
    def flatten_page(self, index: int) -> bool:
        with self._page(index) as page:
            result = pdfium_c.FPDFPage_Flatten(page.raw, pdfium_c.FLAT_NORMALDISPLAY)
        if result == pdfium_c.FLATTEN_FAIL:
            raise EngineError(f"could not flatten page {index + 1} of {self.name}: flattening failed")
        return result == pdfium_c.FLATTEN_SUCCESS

    def save(self) -> bytes:
        buffer = io.BytesIO()
        try:
            self._pdf.save(buffer)
        except pdfium.PdfiumError as exc:
            raise _engine_error(f"could not save {self.name}", exc) from exc
        return buffer.getvalue()

    def import_pages(self, writer: PdfWriter, page_numbers: Iterable[int]) -> None:
        pages = self.reader.pages
        with self._structure("import pages of"):
            for page_number in page_numbers:
                writer.add_page(pages[page_number - 1])

    # ------------------------------------------------------------------
    # Text helpers
    # ------------------------------------------------------------------
    def page_text(self, index: int) -> str:
        with self._page(index) as page:
            textpage = page.get_textpage()
            try:
                return textpage.get_text_bounded()
            finally:
                textpage.close()

    def page_text_structured(
        self,
        index: int,
        *,
        collect_font_information: bool = False,
        pixel_positions: Optional[PixelPositions] = None,
    ) -> StructuredPageText:
        result = StructuredPageText(page=index + 1)
        with self._page(index) as page:
            width, height = page.get_size()
            scale = None
            if pixel_positions is not None and pixel_positions.enabled:
                scale = pixel_positions.scale(width, height)

            textpage = page.get_textpage()
            try:
                for char_index in range(textpage.count_chars()):
                    left, bottom, right, top = textpage.get_charbox(char_index)
                    char = TextChar(
                        text=textpage.get_text_range(char_index, 1),
                        left=left,
                        top=top,
                        right=right,
                        bottom=bottom,
                    )
                    if collect_font_information:
                        char.font = self._char_font(textpage, char_index)
                    if scale is not None:
                        char.pixel_box = _pixel_box(scale, height, left, top, right, bottom)
                    result.chars.append(char)

                for rect_index in range(textpage.count_rects()):
                    left, bottom, right, top = textpage.get_rect(rect_index)
                    rect = TextRect(
                        text=textpage.get_text_bounded(left, bottom, right, top),
                        left=left,
                        top=top,
                        right=right,
                        bottom=bottom,
                    )
                    if scale is not None:
                        rect.pixel_box = _pixel_box(scale, height, left, top, right, bottom)
                    result.rects.append(rect)
            finally:
                textpage.close()
        return result

    @staticmethod
    def _char_font(textpage: Any, char_index: int) -> TextFont:
        flags = ctypes.c_int()
        length = pdfium_c.FPDFText_GetFontInfo(textpage.raw, char_index, None, 0, ctypes.byref(flags))
        name = ""
        if length > 0:
            buffer = ctypes.create_string_buffer(length)
            pdfium_c.FPDFText_GetFontInfo(textpage.raw, char_index, buffer, length, ctypes.byref(flags))
            name = buffer.value.decode("utf-8", errors="replace")
        return TextFont(
            name=name,
            size=pdfium_c.FPDFText_GetFontSize(textpage.raw, char_index),
            weight=pdfium_c.FPDFText_GetFontWeight(textpage.raw, char_index),
        )

    # ------------------------------------------------------------------
    # Document structure helpers
    # ------------------------------------------------------------------
    def metadata(self) -> List[Tuple[str, str]]:
        try:
            info = self._pdf.get_metadata_dict(skip_empty=True)
        except pdfium.PdfiumError as exc:
            raise _engine_error(f"could not read metadata of {self.name}", exc) from exc
        return list(info.items())

    def security_handler_revision(self) -> int:
        return pdfium_c.FPDF_GetSecurityHandlerRevision(self._pdf.raw)

    def permissions(self) -> Permissions:
        flags = pdfium_c.FPDF_GetDocPermissions(self._pdf.raw)
        revision = self.security_handler_revision()

        permissions = Permissions(
            print_document=_bit(flags, 3),
            modify_contents=_bit(flags, 4),
            copy_or_extract_text=_bit(flags, 5),
            add_or_modify_text_annotations=_bit(flags, 6),
            fill_in_interactive_form_fields=_bit(flags, 6),
            create_or_modify_interactive_form_fields=_bit(flags, 6) and _bit(flags, 4),
        )
        if revision >= 3:
            permissions.fill_in_existing_interactive_form_fields = _bit(flags, 9)
            permissions.extract_text_and_graphics = _bit(flags, 10)
            permissions.assemble_document = _bit(flags, 11)
            permissions.print_document_as_faithful_digital_copy = _bit(flags, 12)
        else:
            permissions.fill_in_existing_interactive_form_fields = permissions.fill_in_interactive_form_fields
            permissions.extract_text_and_graphics = permissions.copy_or_extract_text
            permissions.assemble_document = permissions.modify_contents
            permissions.print_document_as_faithful_digital_copy = permissions.print_document
        return permissions

    def signatures(self) -> List[Signature]:
        count_signatures = getattr(pdfium_c, "FPDF_GetSignatureCount", None)
        if count_signatures is None:
            raise FeatureUnavailableError(
                "Signature support is not available in the installed pdfium build."
            )

        signatures: List[Signature] = []
        for index in range(max(count_signatures(self._pdf.raw), 0)):
            signature = pdfium_c.FPDF_GetSignatureObject(self._pdf.raw, index)
            if not signature:
                raise EngineError(f"could not get signature object {index} of {self.name}")
            signatures.append(
                Signature(
                    time=_read_string(pdfium_c.FPDFSignatureObj_GetTime, signature),
                    reason=_read_string(pdfium_c.FPDFSignatureObj_GetReason, signature, utf16=True),
                )
            )
        return signatures

    def attachments(self) -> List[Attachment]:
        attachments: List[Attachment] = []
        for index in range(self._pdf.count_attachments()):
            try:
                attachment = self._pdf.get_attachment(index)
                attachments.append(Attachment(name=attachment.get_name(), content=bytes(attachment.get_data())))
            except pdfium.PdfiumError as exc:
                raise _engine_error(f"could not read attachment {index + 1} of {self.name}", exc) from exc
        return attachments

    def javascripts(self) -> List[JavaScriptAction]:
        reader = self.reader
        actions: List[JavaScriptAction] = []
        with self._structure("read JavaScript of"):
            root = _resolve(reader.trailer.get("/Root"))
            names = _resolve(root.get("/Names")) if root is not None else None
            tree = _resolve(names.get("/JavaScript")) if names is not None else None
            if tree is None:
                return []

            for name, action in self._iter_name_tree(tree):
                script = _resolve(action.get("/JS"))
                if script is None:
                    continue
                if hasattr(script, "get_data"):
                    text = script.get_data().decode("utf-8", errors="replace")
                else:
                    text = str(script)
                actions.append(JavaScriptAction(name=name, script=text))
        return actions

    def _iter_name_tree(self, node: Any) -> Iterator[Tuple[str, Any]]:
        pairs = _resolve(node.get("/Names"))
        if pairs is not None:
            for position in range(0, len(pairs) - 1, 2):
                yield str(_resolve(pairs[position])), _resolve(pairs[position + 1])
        for kid in _resolve(node.get("/Kids")) or []:
            yield from self._iter_name_tree(_resolve(kid))

    def form_fields(self) -> List[FormField]:
        reader = self.reader
        fields: List[FormField] = []
        with self._structure("read form fields of"):
            for page_number, page in enumerate(reader.pages, start=1):
                for reference in _resolve(page.get("/Annots")) or []:
                    annotation = _resolve(reference)
                    if annotation.get("/Subtype") != "/Widget":
                        continue
                    fields.append(self._form_field(page_number, annotation))
        return fields

    @staticmethod
    def _inherited(widget: Any, key: str) -> Any:
        node = widget
        while node is not None:
            if key in node:
                return _resolve(node[key])
            node = _resolve(node.get("/Parent"))
        return None

    def _form_field(self, page_number: int, widget: Any) -> FormField:
        parts: List[str] = []
        node = widget
        while node is not None:
            if "/T" in node:
                parts.append(str(_resolve(node["/T"])))
            node = _resolve(node.get("/Parent"))
        name = ".".join(reversed(parts))

        field_type = self._inherited(widget, "/FT")
        flags = int(self._inherited(widget, "/Ff") or 0)
        value = self._inherited(widget, "/V")
        options = self._inherited(widget, "/Opt")
        tool_tip = self._inherited(widget, "/TU")

        field = FormField(
            page_number=page_number,
            type="UNKNOWN",
            name=name,
            tool_tip=str(tool_tip) if tool_tip is not None else "",
            flags=FormFieldFlags(
                read_only=bool(flags & FF_READ_ONLY),
                required=bool(flags & FF_REQUIRED),
                no_export=bool(flags & FF_NO_EXPORT),
            ),
        )

        if field_type == "/Btn":
            if flags & FF_PUSHBUTTON:
                field.type = "PUSHBUTTON"
            else:
                field.type = "RADIOBUTTON" if flags & FF_RADIO else "CHECKBOX"
                state = widget.get("/AS")
                field.is_checked = state is not None and str(_resolve(state)) != "/Off"
        elif field_type == "/Tx":
            field.type = "TEXTFIELD"
            field.value = _pdf_string(value) if value is not None else ""
        elif field_type == "/Ch":
            field.options = [
                _pdf_string(_resolve(option)[-1]) if isinstance(_resolve(option), list) else _pdf_string(option)
                for option in (options or [])
            ]
            if flags & FF_COMBO:
                field.type = "COMBOBOX"
                field.value = _pdf_string(value) if value is not None else ""
            else:
                field.type = "LISTBOX"
                if value is None:
                    field.values = []
                elif isinstance(value, list):
                    field.values = [_pdf_string(item) for item in value]
                else:
                    field.values = [_pdf_string(value)]
        elif field_type == "/Sig":
            field.type = "SIGNATURE"
        return field

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pdf.close()
        self._reader = None
        self._data = b""
        if self._on_close is not None:
            self._on_close(self)


class PdfiumBackend(PDFBackend):
    """Backend implementation that uses PDFium (``pypdfium2``) and ``pypdf``."""

    def __init__(self) -> None:
        self._documents: List[PdfiumDocument] = []

    def open(self, data: bytes, *, name: str, password: str | None = None) -> PdfiumDocument:
        try:
            pdf = pdfium.PdfDocument(data, password=password)
        except pdfium.PdfiumError as exc:
            kind = EngineErrorKind.from_code(getattr(exc, "err_code", None))
            if kind is None:
                kind = EngineErrorKind.from_code(pdfium_c.FPDF_GetLastError())
            raise _engine_error(f"could not open {name} with pdfium", exc, kind=kind) from exc

        document = PdfiumDocument(name=name, data=data, pdf=pdf, password=password, on_close=self._forget)
        self._documents.append(document)
        LOGGER.debug("Opened %s (%d page(s))", name, document.page_count)
        return document

    def _forget(self, document: PdfiumDocument) -> None:
        if document in self._documents:
            self._documents.remove(document)

    def new_writer(self) -> PdfWriter:
        return PdfWriter()

    def serialize(self, writer: PdfWriter) -> bytes:
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    def close(self) -> None:
        while self._documents:
            self._documents.pop().close()


__all__ = ["PdfiumBackend", "PdfiumDocument"]
