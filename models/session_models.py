"""Session domain models for reply-threaded conversations and image batches."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Tuple


class Role(str, enum.Enum):
	"""Speaker of a conversation turn, named the way the model API expects."""

	USER = "user"
	MODEL = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
	"""One immutable message of a text conversation."""

	role: Role
	text: str


ConversationThread = Tuple[ConversationTurn, ...]


@dataclass(frozen=True)
class ImageBlob:
	"""Encoded image payload plus its MIME type."""

	data: bytes
	mime_type: str = "image/png"

	@property
	def extension(self) -> str:
		subtype = self.mime_type.split("/", 1)[-1].lower()
		return "jpg" if subtype == "jpeg" else subtype or "png"


@dataclass(frozen=True)
class GenerationRecord:
	"""Prompt and images behind a bot reply, kept for later regeneration."""

	prompt: str
	reference_artifacts: Tuple[ImageBlob, ...] = field(default_factory=tuple)
