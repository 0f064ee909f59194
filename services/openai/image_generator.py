"""Single image-generation call through the Responses API image tool."""

import logging
from typing import Any, Optional, Sequence, Tuple

from openai import AsyncOpenAI

from models.session_models import ImageBlob
from services.openai.media_inputs import build_image_inputs
from services.openai.response_parser import extract_image, extract_text

IMAGE_TOOL = {"type": "image_generation"}


class ImageGenerator:
    """Issue one multimodal generation call and return its text and image parts."""

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model

    async def generate(self, prompt: str, images: Sequence[ImageBlob] = ()) -> Tuple[Optional[str], Optional[ImageBlob]]:
        """Return `(text, image)`; either may be None for a legitimate response."""
        response = await self._create_response(prompt, images)
        return extract_text(response), extract_image(response)

    async def _create_response(self, prompt: str, images: Sequence[ImageBlob]) -> Any:
        try:
            return await self.client.responses.create(
                model=self.model,
                input=build_image_inputs(prompt, images),
                tools=[IMAGE_TOOL],
            )
        except Exception as exc:
            logging.error("Error during OpenAI image generation call: %s", exc)
            raise
