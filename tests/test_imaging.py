from __future__ import annotations

import io
import random

import pytest
from PIL import Image

from pdfium_cli.exceptions import InvalidArgumentsError, InvalidOutputError
from pdfium_cli.imaging import encode_image, extension_for


def _noise(size: int = 256) -> Image.Image:
    rng = random.Random(42)
    image = Image.new("RGB", (size, size))
    image.putdata([(rng.randrange(256), rng.randrange(256), rng.randrange(256)) for _ in range(size * size)])
    return image


def test_extension_for() -> None:
    assert extension_for("jpeg") == "jpg"
    assert extension_for("png") == "png"
    with pytest.raises(InvalidArgumentsError):
        extension_for("gif")


def test_encode_png() -> None:
    payload = encode_image(Image.new("RGBA", (10, 10), (0, 0, 255, 128)), "png")
    assert payload.startswith(b"\x89PNG")


def test_encode_jpeg_converts_alpha() -> None:
    payload = encode_image(Image.new("RGBA", (10, 10), (0, 0, 255, 128)), "jpeg")
    with Image.open(io.BytesIO(payload)) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"


def test_max_file_size_lowers_jpeg_quality() -> None:
    image = _noise()
    full = encode_image(image, "jpeg", 95)
    limited = encode_image(image, "jpeg", 95, max_file_size=len(full) // 2)
    assert len(limited) <= len(full) // 2


def test_unreachable_max_file_size_is_output_error() -> None:
    with pytest.raises(InvalidOutputError):
        encode_image(_noise(64), "jpeg", 95, max_file_size=10)


def test_invalid_quality() -> None:
    with pytest.raises(InvalidArgumentsError):
        encode_image(Image.new("RGB", (4, 4)), "jpeg", 0)
