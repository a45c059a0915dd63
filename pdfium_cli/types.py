"""
Type definitions and dataclasses for pdfium-cli.

This module defines the reports produced by the inspection commands. They
serialize to JSON through :func:`dataclasses.asdict`.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PageInfo:
    """
    Size and label of a single page.

    Attributes:
        number: 1-based page number
        width: Page width in points (1/72 inch)
        height: Page height in points
        label: Page label, empty when the document defines none
    """
    number: int
    width: float
    height: float
    label: str = ""


@dataclass
class Permissions:
    """Document permissions as granted to the user password."""
    print_document: bool = True
    modify_contents: bool = True
    copy_or_extract_text: bool = True
    add_or_modify_text_annotations: bool = True
    fill_in_interactive_form_fields: bool = True
    create_or_modify_interactive_form_fields: bool = True
    fill_in_existing_interactive_form_fields: bool = True
    extract_text_and_graphics: bool = True
    assemble_document: bool = True
    print_document_as_faithful_digital_copy: bool = True


@dataclass
class Signature:
    time: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class Attachment:
    name: str
    content: bytes = field(repr=False, default=b"")

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class JavaScriptAction:
    name: str
    script: str


@dataclass
class FormFieldFlags:
    read_only: bool = False
    required: bool = False
    no_export: bool = False


@dataclass
class FormField:
    """
    A single interactive form field.

    Attributes:
        page_number: 1-based page the widget sits on
        type: Field type, e.g. ``TEXTFIELD`` or ``CHECKBOX``
        name: Fully qualified field name
        value: Current value for single-valued fields
        values: Selected values for multi-select list boxes
        is_checked: Checked state for check boxes and radio buttons
        tool_tip: Alternate field name shown as tool tip
        options: Choices offered by combo and list boxes
        flags: Read only / required / no export flags
    """
    page_number: int
    type: str
    name: str
    value: Optional[str] = None
    values: Optional[List[str]] = None
    is_checked: Optional[bool] = None
    tool_tip: str = ""
    options: Optional[List[str]] = None
    flags: FormFieldFlags = field(default_factory=FormFieldFlags)


@dataclass
class PDFInfo:
    """
    PDF document information and metadata.

    Attributes:
        version_number: PDF version as reported by the engine, e.g. 17
        version: Human readable version, e.g. ``"1.7"``
        metadata: Document information entries as tag/value pairs
        page_count: Number of pages
        pages: Size and label per page
        permissions: Permissions granted to the user
        security_handler_revision: Revision of the security handler, -1 when unprotected
        signatures: Digital signatures
        attachments: Embedded files
    """
    version_number: Optional[int]
    version: str
    page_count: int
    metadata: List[Dict[str, str]] = field(default_factory=list)
    pages: List[PageInfo] = field(default_factory=list)
    permissions: Permissions = field(default_factory=Permissions)
    security_handler_revision: int = -1
    signatures: List[Signature] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["attachments"] = [
            {"name": attachment.name, "size": attachment.size}
            for attachment in self.attachments
        ]
        return data


@dataclass
class PageText:
    page: int
    text: str


@dataclass
class TextFont:
    name: str
    size: float
    weight: int


@dataclass
class TextChar:
    """A character with its bounding box in points (PDF coordinates)."""
    text: str
    left: float
    top: float
    right: float
    bottom: float
    font: Optional[TextFont] = None
    pixel_box: Optional[Dict[str, int]] = None


@dataclass
class TextRect:
    text: str
    left: float
    top: float
    right: float
    bottom: float
    pixel_box: Optional[Dict[str, int]] = None


@dataclass
class StructuredPageText:
    page: int
    chars: List[TextChar] = field(default_factory=list)
    rects: List[TextRect] = field(default_factory=list)


@dataclass
class PixelPositions:
    """Target raster size used to convert point coordinates to pixels.

    Either ``dpi`` or an explicit ``width``/``height`` can be given; when
    only one of width and height is set the other follows the page ratio.
    """
    dpi: int = 0
    width: int = 0
    height: int = 0

    @property
    def enabled(self) -> bool:
        return self.dpi > 0 or self.width > 0 or self.height > 0

    def scale(self, page_width: float, page_height: float) -> tuple:
        if self.dpi > 0:
            factor = self.dpi / 72
            return factor, factor
        if self.width > 0 and self.height > 0:
            return self.width / page_width, self.height / page_height
        if self.width > 0:
            factor = self.width / page_width
            return factor, factor
        factor = self.height / page_height
        return factor, factor
