"""Text generation helper built on OpenAI's Responses API."""

import logging
from typing import Optional, Sequence

from openai import AsyncOpenAI

from models.session_models import ConversationTurn
from services.openai.media_inputs import build_conversation_inputs
from services.openai.response_parser import extract_text


class TextGenerator:
    """Send prompts and dialogue histories to the text model."""

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        """Initialize the generator with a shared OpenAI client."""
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model

    async def complete(self, prompt: str) -> Optional[str]:
        """Return the model's answer to a single prompt, or None if it produced no text."""
        try:
            response = await self.client.responses.create(model=self.model, input=prompt)
        except Exception as exc:
            logging.error("OpenAI text request failed: %s", exc)
            raise
        return extract_text(response)

    async def reply(self, turns: Sequence[ConversationTurn]) -> str:
        """Return the next model turn for a conversation ending with a user turn."""
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=build_conversation_inputs(turns),
            )
        except Exception as exc:
            logging.error("OpenAI conversation request failed: %s", exc)
            raise
        text = extract_text(response)
        if not text:
            raise RuntimeError("Conversation response did not include text.")
        return text
