"""Utilities to build multimodal input payloads for the Responses API."""

import base64
from typing import Any, Dict, List, Sequence

from models.session_models import ConversationTurn, ImageBlob, Role


def to_image_data_url(image: ImageBlob) -> str:
    """Encode an image blob as a data URL suitable for vision input."""
    encoded = base64.b64encode(image.data).decode("utf-8")
    return f"data:{image.mime_type};base64,{encoded}"


def build_image_inputs(prompt: str, images: Sequence[ImageBlob]) -> List[Dict[str, Any]]:
    """Build one user message holding the prompt followed by each image, in order."""
    content: List[Dict[str, Any]] = [{"type": "input_text", "text": prompt}]
    for image in images:
        content.append({"type": "input_image", "image_url": to_image_data_url(image)})
    return [{"type": "message", "role": "user", "content": content}]


def build_conversation_inputs(turns: Sequence[ConversationTurn]) -> List[Dict[str, Any]]:
    """Replay a conversation thread as Responses API messages."""
    inputs: List[Dict[str, Any]] = []
    for turn in turns:
        content_type = "output_text" if turn.role is Role.MODEL else "input_text"
        inputs.append(
            {
                "type": "message",
                "role": turn.role.value,
                "content": [{"type": content_type, "text": turn.text}],
            }
        )
    return inputs
