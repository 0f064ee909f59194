"""Helpers to pull text and images out of Responses API output."""

import base64
import logging
from typing import Any, Optional

from models.session_models import ImageBlob
from utils.media_validation import sniff_image_mime

IMAGE_CALL_TYPE = "image_generation_call"


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def extract_text(response: Any) -> Optional[str]:
    """Return the concatenated output_text of a response, or None when absent.

    Image-only responses are normal, so a missing text part is not an error.
    """
    parts = []
    for item in _field(response, "output", None) or []:
        if _field(item, "type") != "message":
            continue
        for content in _field(item, "content", None) or []:
            if _field(content, "type") == "output_text" and _field(content, "text"):
                parts.append(_field(content, "text"))
    if parts:
        return "\n".join(parts).strip() or None
    fallback = _field(response, "output_text", None)
    return fallback.strip() if isinstance(fallback, str) and fallback.strip() else None


def extract_image(response: Any) -> Optional[ImageBlob]:
    """Return the first inline image produced by the image_generation tool."""
    for item in _field(response, "output", None) or []:
        if _field(item, "type") != IMAGE_CALL_TYPE:
            continue
        result = _field(item, "result")
        if not result:
            continue
        try:
            data = base64.b64decode(result)
        except Exception as exc:
            logging.error("Discarding undecodable image payload: %s", exc)
            continue
        output_format = _field(item, "output_format")
        mime_type = f"image/{output_format}" if output_format else sniff_image_mime(data)
        return ImageBlob(data=data, mime_type=mime_type)
    return None
