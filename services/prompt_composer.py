"""Turn raw user text into the prompt sent to the image model."""

from __future__ import annotations

import logging
from typing import Optional

from services.openai.image_prompts import build_generation_prompt, build_refinement_prompt
from services.openai.text_generator import TextGenerator

LOGGER = logging.getLogger(__name__)


class PromptComposer:
    """Refine and wrap creative prompts.

    Refinement asks the text model to keep only the creative content of a
    prompt. It is optional and never fatal: any failure or empty answer falls
    back to the raw prompt.
    """

    def __init__(self, text_generator: Optional[TextGenerator] = None, refine_enabled: bool = True) -> None:
        self.text_generator = text_generator
        self.refine_enabled = refine_enabled and text_generator is not None

    def compose(self, user_prompt: str) -> str:
        return build_generation_prompt(user_prompt)

    async def refine(self, raw_prompt: str) -> str:
        """Return the refined creative description, or `raw_prompt` on any failure."""
        if not self.refine_enabled:
            return raw_prompt
        try:
            refined = await self.text_generator.complete(build_refinement_prompt(raw_prompt))
        except Exception as exc:
            LOGGER.warning("Prompt refinement failed, using original prompt: %s", exc)
            return raw_prompt
        refined = (refined or "").strip()
        LOGGER.info("Refined prompt %r -> %r", raw_prompt, refined)
        return refined or raw_prompt
