"""Fan out image generation variants and report the batch back to the chat."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from models.chat_models import ChatChannel, NamedImage, StatusMessage
from models.generation_models import GenerationBatch, VariantResult
from models.request_models import (
    AttachmentRef,
    ImageRegenerationRequest,
    ImageRequest,
    InboundMessage,
    ReferenceImageRequest,
)
from models.session_models import GenerationRecord, ImageBlob
from services.attachment_fetcher import AttachmentFetcher
from services.error_classifier import ErrorClassifier
from services.openai.image_generator import ImageGenerator
from services.prompt_composer import PromptComposer
from services.session_store import SessionStore
from utils.heartbeat import typing_heartbeat

LOGGER = logging.getLogger(__name__)

STATUS_PREPARING = "🎨 **Step 1/3:** Preparing your image generation..."
STATUS_PREPARING_REGENERATION = "🔄 **Step 1/3:** Preparing to regenerate..."
STATUS_REFINING = "✨ **Step 2/3:** Optimizing your prompt with AI..."
STATUS_GENERATING = "🖌️ **Step 3/3:** Generating {count} variants... Please wait."
NO_OUTPUT_NOTICE = "Generation finished, but no output (text or image) was found in the responses."


class GenerationOrchestrator:
    """Run one image request from status message to stored generation record.

    Each of the `variant_count` calls is awaited in its own result slot, so one
    failing variant does not discard the others. Only when every variant fails
    is the request reported as an error.
    """

    def __init__(
        self,
        image_generator: ImageGenerator,
        composer: PromptComposer,
        store: SessionStore,
        *,
        fetcher: Optional[AttachmentFetcher] = None,
        errors: Optional[ErrorClassifier] = None,
        variant_count: int = 3,
        heartbeat_interval: float = 5.0,
        variant_timeout: Optional[float] = None,
    ) -> None:
        if variant_count < 1:
            raise ValueError("variant_count must be at least 1.")
        self.image_generator = image_generator
        self.composer = composer
        self.store = store
        self.fetcher = fetcher or AttachmentFetcher()
        self.errors = errors or ErrorClassifier(image_model=image_generator.model)
        self.variant_count = variant_count
        self.heartbeat_interval = heartbeat_interval
        self.variant_timeout = variant_timeout

    async def run(self, request: ImageRequest, inbound: InboundMessage, channel: ChatChannel) -> None:
        """Post a status message, generate, and edit the status with the outcome."""
        is_regeneration = isinstance(request, ImageRegenerationRequest)
        LOGGER.info("Generating images (regeneration=%s): %s", is_regeneration, request.prompt)
        await _signal_typing(channel)
        status = await channel.reply(inbound.id, STATUS_PREPARING_REGENERATION if is_regeneration else STATUS_PREPARING)

        try:
            async with typing_heartbeat(channel.send_typing, self.heartbeat_interval):
                await status.edit(STATUS_REFINING)
                refined = await self.composer.refine(request.prompt)
                await status.edit(STATUS_GENERATING.format(count=self.variant_count))
                batch = await self.generate(
                    refined,
                    reference_artifacts=request.reference_artifacts if is_regeneration else (),
                    extra_attachments=request.extra_images if isinstance(request, ReferenceImageRequest) else (),
                    message_attachments=getattr(request, "attachments", ()),
                    is_regeneration=is_regeneration,
                )
        except Exception as exc:
            LOGGER.exception("Generation error")
            await status.edit(self.errors.describe(exc))
            return

        await self.emit(batch, status)

    async def generate(
        self,
        prompt: str,
        *,
        reference_artifacts: Sequence[ImageBlob] = (),
        extra_attachments: Sequence[ImageBlob] = (),
        message_attachments: Sequence[AttachmentRef] = (),
        is_regeneration: bool = False,
    ) -> GenerationBatch:
        """Issue the variant calls concurrently and collect them in issue order.

        `prompt` is the refined creative description; it is wrapped by the
        composer here and kept unwrapped on the returned batch.
        """
        images: List[ImageBlob] = []
        if is_regeneration:
            images.extend(reference_artifacts)
            LOGGER.debug("Added %d previously generated images for regeneration", len(reference_artifacts))
        images.extend(extra_attachments)
        if message_attachments and not is_regeneration:
            images.extend(await self.fetcher.fetch_images(message_attachments))

        composed = self.composer.compose(prompt)
        LOGGER.debug("Waiting for %d generations with %d input images", self.variant_count, len(images))
        variants = await asyncio.gather(
            *(self._run_variant(index, composed, images) for index in range(self.variant_count))
        )
        batch = GenerationBatch(prompt=prompt, variants=list(variants))
        LOGGER.info(
            "Generation finished: %d succeeded, %d failed, %d images",
            len(batch.succeeded),
            len(batch.failed),
            len(batch.images),
        )
        return batch

    async def _run_variant(self, index: int, composed: str, images: Sequence[ImageBlob]) -> VariantResult:
        try:
            call = self.image_generator.generate(composed, images)
            if self.variant_timeout:
                text, image = await asyncio.wait_for(call, self.variant_timeout)
            else:
                text, image = await call
        except Exception as exc:
            LOGGER.error("Variant %d failed: %s", index + 1, exc)
            return VariantResult(index=index, error=exc)
        return VariantResult(index=index, text=text, image=image)

    async def emit(self, batch: GenerationBatch, status: StatusMessage) -> Optional[str]:
        """Edit the status message with the batch; returns the id of an image reply."""
        if batch.images:
            files: List[NamedImage] = [
                (f"generated_variant_{v.index + 1}.{v.image.extension}", v.image)
                for v in batch.succeeded
                if v.image is not None
            ]
            content = f"Generated Images:\n{batch.combined_text}" if batch.combined_text else "Here are your generated variants:"
            if batch.failed:
                content += f"\n({len(batch.failed)} of {len(batch.variants)} variants failed.)"
            reply_id = await status.edit(content, files)
            self.store.put_record(reply_id, GenerationRecord(prompt=batch.prompt, reference_artifacts=tuple(batch.images)))
            return reply_id
        if batch.all_failed:
            await status.edit(self.errors.describe(batch.failed[0].error))
        elif batch.combined_text:
            await status.edit(batch.combined_text)
        else:
            await status.edit(NO_OUTPUT_NOTICE)
        return None


async def _signal_typing(channel: ChatChannel) -> None:
    try:
        await channel.send_typing()
    except Exception as exc:
        LOGGER.debug("Typing signal failed: %s", exc)
