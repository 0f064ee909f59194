"""Validation helpers for image payloads exchanged with the chat platform."""

import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

GENERIC_CONTENT_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def is_image_content_type(content_type: Optional[str]) -> bool:
    """Return True when the reported MIME type is an image type."""
    if not content_type:
        return False
    return content_type.lower().split(";", 1)[0].strip().startswith("image/")


def sniff_image_mime(data: bytes, default: str = "image/png") -> str:
    """Detect the MIME type of encoded image bytes with Pillow.

    Falls back to `default` when the bytes are not a recognised image.
    """
    if not data:
        return default
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return default
    if not fmt:
        return default
    return Image.MIME.get(fmt.upper(), default)


def resolve_image_mime(data: bytes, reported: Optional[str]) -> str:
    """Prefer the platform-reported type unless it is missing or generic."""
    if reported:
        normalized = reported.lower().split(";", 1)[0].strip()
        if normalized not in GENERIC_CONTENT_TYPES:
            return normalized
    return sniff_image_mime(data)
