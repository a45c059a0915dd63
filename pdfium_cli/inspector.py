"""Report builders for the ``info``, ``form`` and ``text`` commands.

Each report is built into the dataclasses of :mod:`pdfium_cli.types` and then
rendered either as human readable text or as indented JSON.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, List, Optional, Sequence, Union

from .backends import BackendDocument
from .exceptions import FeatureUnavailableError, InvalidArgumentsError
from .types import FormField, PageInfo, PageText, PDFInfo, PixelPositions, StructuredPageText

LOGGER = logging.getLogger(__name__)

OUTPUT_TYPES = ("text", "json")
JSON_DETAILS = ("compact", "full")

TextReport = Union[List[PageText], List[StructuredPageText]]


def format_version(version_number: Optional[int]) -> str:
    """Turn the engine's file version (e.g. ``17``) into ``"1.7"``."""

    if not version_number:
        return "unknown"
    return f"{version_number // 10}.{version_number % 10}"


def to_json(report: Any) -> str:
    if isinstance(report, PDFInfo):
        data = report.to_dict()
    elif isinstance(report, list):
        data = [asdict(item) if is_dataclass(item) else item for item in report]
    elif is_dataclass(report):
        data = asdict(report)
    else:
        data = report
    return json.dumps(data, indent=2, ensure_ascii=False)


# ----------------------------------------------------------------------
# info
# ----------------------------------------------------------------------
def build_info(document: BackendDocument) -> PDFInfo:
    version_number = document.version
    pages = []
    for index in range(document.page_count):
        width, height = document.page_size(index)
        pages.append(
            PageInfo(number=index + 1, width=width, height=height, label=document.page_label(index))
        )

    try:
        signatures = document.signatures()
    except FeatureUnavailableError as exc:
        LOGGER.info("Skipping signatures of %s: %s", document.name, exc)
        signatures = []

    return PDFInfo(
        version_number=version_number,
        version=format_version(version_number),
        page_count=document.page_count,
        metadata=[{"tag": tag, "value": value} for tag, value in document.metadata()],
        pages=pages,
        permissions=document.permissions(),
        security_handler_revision=document.security_handler_revision(),
        signatures=signatures,
        attachments=document.attachments(),
    )


def _allowed(value: bool) -> str:
    return "Allowed" if value else "Forbidden"


def render_info_text(info: PDFInfo) -> str:
    lines = [f"PDF Version: {info.version}"]

    if info.metadata:
        lines.append("Metadata:")
        lines.extend(f" -  {entry['tag']}: {entry['value']}" for entry in info.metadata)

    lines.append(f"Page count: {info.page_count}")
    lines.append("Page size (in points (WxH), one point is 1/72 inch (around 0.3528 mm)):")
    lines.extend(
        f" - Page {page.number}, size: {page.width:.2f} x {page.height:.2f}, label: {page.label}"
        for page in info.pages
    )

    permissions = info.permissions
    lines.extend(
        [
            "Permissions:",
            f" - Print Document: {_allowed(permissions.print_document)}",
            f" - Modify Contents: {_allowed(permissions.modify_contents)}",
            f" - Copy Or Extract Text: {_allowed(permissions.copy_or_extract_text)}",
            f" - Add Or Modify Text Annotations: {_allowed(permissions.add_or_modify_text_annotations)}",
            f" - Fill In Interactive Form Fields: {_allowed(permissions.fill_in_interactive_form_fields)}",
            " - Create Or Modify Interactive Form Fields: "
            f"{_allowed(permissions.create_or_modify_interactive_form_fields)}",
            " - Fill In Existing Interactive Form Fields: "
            f"{_allowed(permissions.fill_in_existing_interactive_form_fields)}",
            f" - Extract Text And Graphics: {_allowed(permissions.extract_text_and_graphics)}",
            f" - Assemble Document: {_allowed(permissions.assemble_document)}",
            " - Print Document As Faithful Digital Copy: "
            f"{_allowed(permissions.print_document_as_faithful_digital_copy)}",
        ]
    )

    revision = f"Security Handler Revision: {info.security_handler_revision}"
    if info.security_handler_revision == -1:
        revision += " (no protection)"
    lines.append(revision)

    if info.signatures:
        lines.append("Signatures:")
        lines.extend(
            f" - Signature {number}, timestamp: {signature.time or ''}, reason: {signature.reason or ''}"
            for number, signature in enumerate(info.signatures, start=1)
        )

    if info.attachments:
        lines.append("Attachments:")
        lines.extend(
            f" - Attachment {number}, name: {attachment.name}, size: {attachment.size} bytes"
            for number, attachment in enumerate(info.attachments, start=1)
        )

    return "\n".join(lines) + "\n"


# ----------------------------------------------------------------------
# form
# ----------------------------------------------------------------------
def build_form(document: BackendDocument) -> List[FormField]:
    return document.form_fields()


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _bullets(items: Optional[List[str]]) -> str:
    if not items:
        return " None"
    return "\n   - " + "\n   - ".join(items)


def render_form_text(fields: Sequence[FormField]) -> str:
    if not fields:
        return "No form fields\n"

    lines = ["Form fields:"]
    for field in fields:
        lines.append(f"- Name: {field.name}")
        if field.tool_tip:
            lines.append(f"  ToolTip: {field.tool_tip}")
        lines.append(f"  Page number: {field.page_number}")
        lines.append(f"  Field type: {field.type}")
        if field.is_checked is not None:
            lines.append(f"  Checked: {_yes_no(field.is_checked)}")
        if field.value is not None:
            lines.append(f"  Value: {field.value}")
        if field.type == "LISTBOX":
            lines.append(f"  Values:{_bullets(field.values)}")
        if field.type in ("COMBOBOX", "LISTBOX"):
            lines.append(f"  Options:{_bullets(field.options)}")
        lines.append("  Flags:")
        lines.append(f"   - Read Only: {_yes_no(field.flags.read_only)}")
        lines.append(f"   - Required: {_yes_no(field.flags.required)}")
        lines.append(f"   - No Export: {_yes_no(field.flags.no_export)}")
        lines.append("")
    return "\n".join(lines) + "\n"


# ----------------------------------------------------------------------
# text
# ----------------------------------------------------------------------
def build_text(
    document: BackendDocument,
    pages: Sequence[int],
    *,
    details: str = "compact",
    collect_font_information: bool = False,
    pixel_positions: Optional[PixelPositions] = None,
) -> TextReport:
    """Collect the text of the 1-based ``pages``.

    ``details="full"`` returns characters and rectangles with their
    coordinates instead of the plain text of each page.
    """

    if details not in JSON_DETAILS:
        raise InvalidArgumentsError(f"unsupported output details {details}, use compact or full")

    if details == "full":
        return [
            document.page_text_structured(
                page - 1,
                collect_font_information=collect_font_information,
                pixel_positions=pixel_positions,
            )
            for page in pages
        ]
    return [PageText(page=page, text=document.page_text(page - 1)) for page in pages]


def render_text(report: Sequence[PageText], *, page_header: bool = True) -> str:
    blocks = []
    for page_text in report:
        header = f"Page {page_text.page}\n" if page_header else ""
        blocks.append(f"{header}{page_text.text}\n")
    return "\n".join(blocks)


__all__ = [
    "OUTPUT_TYPES",
    "JSON_DETAILS",
    "format_version",
    "to_json",
    "build_info",
    "render_info_text",
    "build_form",
    "render_form_text",
    "build_text",
    "render_text",
]
