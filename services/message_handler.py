"""Entry point that turns one inbound chat message into bot replies."""

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
    RequestMode,
    TextContinuation,
)
from services.context_resolver import ContextResolver
from services.generation_orchestrator import GenerationOrchestrator
from services.text_conversation import TextConversation

LOGGER = logging.getLogger(__name__)

CLARIFY_MESSAGE = "How can I help you? I can generate images or have a conversation with you!"
FAILURE_MESSAGE = "❌ Something went wrong while handling your message."


class MessageHandler:
    """Resolve the request mode and dispatch to the image or text path."""

    def __init__(
        self,
        resolver: ContextResolver,
        orchestrator: GenerationOrchestrator,
        conversation: TextConversation,
    ) -> None:
        self.resolver = resolver
        self.orchestrator = orchestrator
        self.conversation = conversation

    async def handle(self, inbound: InboundMessage, channel: ChatChannel) -> Optional[RequestMode]:
        """Process one message end to end. Failures are reported, never raised."""
        try:
            reply_target = await self.resolver.fetch_reply_target(channel, inbound)
            mode = await self.resolver.resolve(inbound, reply_target)
            LOGGER.info("Message %s resolved to %s", inbound.id, type(mode).__name__)
            await self.dispatch(mode, inbound, channel)
            return mode
        except Exception:
            LOGGER.exception("Unhandled error while processing message %s", inbound.id)
            try:
                await channel.reply(inbound.id, FAILURE_MESSAGE)
            except Exception as exc:
                LOGGER.error("Could not report failure for message %s: %s", inbound.id, exc)
            return None

    async def dispatch(self, mode: RequestMode, inbound: InboundMessage, channel: ChatChannel) -> None:
        if isinstance(mode, ClarifyRequest):
            await channel.reply(inbound.id, CLARIFY_MESSAGE)
        elif isinstance(mode, (NewImageRequest, ImageRegenerationRequest, ReferenceImageRequest)):
            await self.orchestrator.run(mode, inbound, channel)
        elif isinstance(mode, (NewTextConversation, TextContinuation)):
            await self.conversation.respond(mode, inbound, channel)
        else:
            raise ValueError(f"Unsupported request mode: {mode!r}")
