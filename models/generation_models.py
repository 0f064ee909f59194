"""Result types for one fan-out of image generation variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from models.session_models import ImageBlob


@dataclass
class VariantResult:
    """Outcome of a single variant call, kept in its issue-order slot."""

    index: int
    text: Optional[str] = None
    image: Optional[ImageBlob] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class GenerationBatch:
    """Aggregated variants: successes and failures, in issue order."""

    prompt: str
    variants: List[VariantResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[VariantResult]:
        return [v for v in self.variants if v.succeeded]

    @property
    def failed(self) -> List[VariantResult]:
        return [v for v in self.variants if not v.succeeded]

    @property
    def images(self) -> List[ImageBlob]:
        return [v.image for v in self.succeeded if v.image is not None]

    @property
    def text_outputs(self) -> List[str]:
        return [f"Variant {v.index + 1}: {v.text}" for v in self.succeeded if v.text]

    @property
    def combined_text(self) -> str:
        return "\n".join(self.text_outputs)

    @property
    def all_failed(self) -> bool:
        return bool(self.variants) and not self.succeeded
