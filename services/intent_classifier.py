"""Keyword-based intent detection for inbound chat messages."""

from __future__ import annotations

import enum
from typing import Iterable, Tuple

IMAGE_KEYWORDS: Tuple[str, ...] = (
    "generate",
    "create",
    "make",
    "draw",
    "image",
    "picture",
    "photo",
    "render",
    "art",
    "artwork",
    "illustration",
    "sketch",
    "design",
    "visualize",
    "show me",
    "paint",
)


class Intent(str, enum.Enum):
    IMAGE = "image"
    TEXT = "text"


class IntentClassifier:
    """Decide whether a message asks for an image or for a conversation.

    Matching is a case-insensitive substring test, so "smart" counts as "art".
    """

    def __init__(self, keywords: Iterable[str] = IMAGE_KEYWORDS) -> None:
        self.keywords = tuple(keyword.lower() for keyword in keywords)

    def classify(self, text: str) -> Intent:
        lowered = (text or "").lower()
        if any(keyword in lowered for keyword in self.keywords):
            return Intent.IMAGE
        return Intent.TEXT

    def wants_image_generation(self, text: str) -> bool:
        return self.classify(text) is Intent.IMAGE
