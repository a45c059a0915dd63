"""Encoding of rendered and extracted images."""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image

from .exceptions import InvalidArgumentsError, InvalidOutputError

LOGGER = logging.getLogger(__name__)

FILE_TYPES = ("jpeg", "png")
DEFAULT_JPEG_QUALITY = 95
MAX_FILE_SIZE = 20 * 1024 * 1024

_QUALITY_STEP = 5
_MIN_QUALITY = 5


def extension_for(file_type: str) -> str:
    if file_type == "jpeg":
        return "jpg"
    if file_type == "png":
        return "png"
    raise InvalidArgumentsError(f"unsupported file type {file_type}, use jpeg or png")


def _encode(image: Image.Image, file_type: str, quality: int) -> bytes:
    buffer = io.BytesIO()
    if file_type == "jpeg":
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(buffer, format="JPEG", quality=quality)
    else:
        image.save(buffer, format="PNG")
    return buffer.getvalue()


def encode_image(
    image: Image.Image,
    file_type: str = "jpeg",
    quality: int = DEFAULT_JPEG_QUALITY,
    max_file_size: Optional[int] = None,
) -> bytes:
    """Encode ``image`` as JPEG or PNG.

    With ``max_file_size`` set, JPEG quality is lowered in steps of 5 until
    the result fits. PNG is lossless and only checked against the limit.

    Raises:
        InvalidArgumentsError: For an unknown file type or quality.
        InvalidOutputError: If the image cannot be made small enough.
    """

    extension_for(file_type)
    if not 1 <= quality <= 100:
        raise InvalidArgumentsError(f"jpeg quality {quality} must be between 1 and 100")

    payload = _encode(image, file_type, quality)
    if not max_file_size or len(payload) <= max_file_size:
        return payload

    if file_type == "jpeg":
        while quality > _MIN_QUALITY:
            quality = max(quality - _QUALITY_STEP, _MIN_QUALITY)
            payload = _encode(image, file_type, quality)
            LOGGER.debug("Re-encoded at quality %d: %d bytes", quality, len(payload))
            if len(payload) <= max_file_size:
                return payload

    raise InvalidOutputError(
        f"could not encode image below {max_file_size} bytes, smallest result was {len(payload)} bytes"
    )


__all__ = ["FILE_TYPES", "DEFAULT_JPEG_QUALITY", "MAX_FILE_SIZE", "extension_for", "encode_image"]
