"""Decide how an inbound message relates to earlier bot replies."""

from __future__ import annotations

import logging
from typing import Optional

from models.chat_models import ChatChannel
from models.request_models import (
    ClarifyRequest,
    ImageRegenerationRequest,
    InboundMessage,
    NewImageRequest,
    NewTextConversation,
    ReferenceImageRequest,
    ReplyTarget,
    RequestMode,
    TextContinuation,
)
from services.attachment_fetcher import AttachmentFetcher
from services.intent_classifier import IntentClassifier
from services.openai.image_prompts import extract_prompt
from services.session_store import SessionStore
from utils.media_validation import is_image_content_type

LOGGER = logging.getLogger(__name__)


class ContextResolver:
    """Pick the request mode for one inbound message.

    Rules are evaluated in order and the first match wins:

    1. No reply target: classify the content as a new image or text request.
    2. Reply to a bot message with a generation record: regenerate from it.
    3. Reply to a bot message with a conversation thread: continue the thread.
    4. Reply to a user message carrying images, with image intent: use those
       images as references for a new generation.
    5. Anything else: classify the content alone, as in rule 1.

    Regeneration must be checked before thread continuation, and the current
    message's attachments are ignored while regenerating.
    """

    def __init__(
        self,
        store: SessionStore,
        classifier: Optional[IntentClassifier] = None,
        fetcher: Optional[AttachmentFetcher] = None,
    ) -> None:
        self.store = store
        self.classifier = classifier or IntentClassifier()
        self.fetcher = fetcher or AttachmentFetcher()

    async def fetch_reply_target(self, channel: ChatChannel, inbound: InboundMessage) -> Optional[ReplyTarget]:
        """Return the replied-to message, or None when absent or unreachable."""
        if not inbound.reply_to_id:
            return None
        try:
            return await channel.fetch_reply_target(inbound.reply_to_id)
        except Exception as exc:
            LOGGER.error("Error fetching replied message %s: %s", inbound.reply_to_id, exc)
            return None

    async def resolve(self, inbound: InboundMessage, reply_target: Optional[ReplyTarget]) -> RequestMode:
        content = inbound.content.strip()
        if not content:
            return ClarifyRequest()
        if reply_target is None:
            return self._fresh(inbound, content)

        if reply_target.from_bot:
            record = self.store.get_record(reply_target.id)
            if record is not None:
                return ImageRegenerationRequest(
                    prompt=f"{record.prompt}, {content}",
                    reference_artifacts=record.reference_artifacts,
                )
            thread = self.store.get_thread(reply_target.id)
            if thread is not None:
                return TextContinuation(content=content, anchor_id=reply_target.id, thread=thread)
        else:
            image_attachments = [a for a in reply_target.attachments if is_image_content_type(a.content_type)]
            if image_attachments and self.classifier.wants_image_generation(content):
                LOGGER.debug("User replied to a message with %d image attachments", len(image_attachments))
                extra_images = await self.fetcher.fetch_images(image_attachments)
                return ReferenceImageRequest(
                    prompt=extract_prompt(content),
                    extra_images=tuple(extra_images),
                    attachments=inbound.attachments,
                )

        return self._fresh(inbound, content)

    def _fresh(self, inbound: InboundMessage, content: str) -> RequestMode:
        if self.classifier.wants_image_generation(content):
            return NewImageRequest(prompt=extract_prompt(content), attachments=inbound.attachments)
        return NewTextConversation(content=content)
