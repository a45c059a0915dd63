from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Optional
import sys

import pytest
from PIL import Image
from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdfium_cli.streams import DEFAULT_DELIMITER, separator_for  # noqa: E402


def _write(writer: PdfWriter, path: Path) -> Path:
    with path.open("wb") as stream:
        writer.write(stream)
    return path


def _rect(*values: float) -> ArrayObject:
    return ArrayObject([FloatObject(value) for value in values])


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    for _ in range(5):
        writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Producer": "pdfium-cli-tests", "/Title": "Sample"})
    return _write(writer, tmp_path / "sample.pdf")


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, pages: int = 1, title: Optional[str] = None) -> Path:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=72, height=72)
        if title is not None:
            writer.add_metadata({"/Title": title})
        return _write(writer, tmp_path / filename)

    return _create


@pytest.fixture()
def text_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    for line in (b"Hello World", b"Second page"):
        page = writer.add_blank_page(width=200, height=200)
        font = DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject("/Helvetica"),
            }
        )
        page[NameObject("/Resources")] = DictionaryObject(
            {NameObject("/Font"): DictionaryObject({NameObject("/F1"): writer._add_object(font)})}
        )
        content = DecodedStreamObject()
        content.set_data(b"BT /F1 18 Tf 20 100 Td (" + line + b") Tj ET")
        page[NameObject("/Contents")] = writer._add_object(content)
    return _write(writer, tmp_path / "text.pdf")


@pytest.fixture()
def image_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "image.pdf"
    Image.new("RGB", (40, 30), "red").save(path, format="PDF", resolution=72)
    return path


@pytest.fixture()
def attachment_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_attachment("notes.txt", b"hello attachment")
    return _write(writer, tmp_path / "attachment.pdf")


@pytest.fixture()
def javascript_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_js("app.alert('hello');")
    return _write(writer, tmp_path / "javascript.pdf")


@pytest.fixture()
def encrypted_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.encrypt("secret")
    return _write(writer, tmp_path / "encrypted.pdf")


@pytest.fixture()
def aes256_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    for _ in range(2):
        writer.add_blank_page(width=200, height=200)
    writer.encrypt(user_password="", owner_password="owner", algorithm="AES-256")
    return _write(writer, tmp_path / "aes256.pdf")


@pytest.fixture()
def form_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    page = writer.add_blank_page(width=200, height=200)

    name_field = writer._add_object(
        DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Annot"),
                NameObject("/Subtype"): NameObject("/Widget"),
                NameObject("/FT"): NameObject("/Tx"),
                NameObject("/T"): TextStringObject("name"),
                NameObject("/TU"): TextStringObject("Your name"),
                NameObject("/V"): TextStringObject("John"),
                NameObject("/Ff"): NumberObject(2),
                NameObject("/Rect"): _rect(10, 150, 150, 170),
            }
        )
    )
    agree_field = writer._add_object(
        DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Annot"),
                NameObject("/Subtype"): NameObject("/Widget"),
                NameObject("/FT"): NameObject("/Btn"),
                NameObject("/T"): TextStringObject("agree"),
                NameObject("/V"): NameObject("/Yes"),
                NameObject("/AS"): NameObject("/Yes"),
                NameObject("/Ff"): NumberObject(1),
                NameObject("/Rect"): _rect(10, 100, 30, 120),
            }
        )
    )
    color_field = writer._add_object(
        DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Annot"),
                NameObject("/Subtype"): NameObject("/Widget"),
                NameObject("/FT"): NameObject("/Ch"),
                NameObject("/T"): TextStringObject("color"),
                NameObject("/V"): TextStringObject("Green"),
                NameObject("/Ff"): NumberObject(1 << 17),
                NameObject("/Opt"): ArrayObject(
                    [TextStringObject("Red"), TextStringObject("Green"), TextStringObject("Blue")]
                ),
                NameObject("/Rect"): _rect(10, 50, 150, 70),
            }
        )
    )

    fields = ArrayObject([name_field, agree_field, color_field])
    page[NameObject("/Annots")] = fields
    writer._root_object[NameObject("/AcroForm")] = DictionaryObject({NameObject("/Fields"): fields})
    return _write(writer, tmp_path / "form.pdf")


@pytest.fixture()
def stdin_stream() -> Callable[..., io.BytesIO]:
    """Concatenate documents the way a shell pipe feeds them."""

    def _build(*paths: Path, delimiter: str = DEFAULT_DELIMITER) -> io.BytesIO:
        separator = separator_for(delimiter)
        return io.BytesIO(separator.join(path.read_bytes() for path in paths))

    return _build
