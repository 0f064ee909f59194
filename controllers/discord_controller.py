"""Discord adapter: turns gateway messages into pipeline calls and back."""

from __future__ import annotations

import io
import logging
import re
from typing import Optional, Sequence, Tuple

import discord

from models.chat_models import NamedImage
from models.request_models import AttachmentRef, InboundMessage, ReplyTarget
from services.message_handler import MessageHandler

LOGGER = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"<@!?[0-9]+>")
MAX_CONTENT_LENGTH = 2000


def strip_mentions(text: str) -> str:
    """Remove user mentions such as <@123> or <@!123> and surrounding whitespace."""
    return MENTION_PATTERN.sub("", text or "").strip()


def truncate_content(text: str, limit: int = MAX_CONTENT_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def to_attachment_refs(message: discord.Message) -> Tuple[AttachmentRef, ...]:
    return tuple(
        AttachmentRef(url=a.url, filename=a.filename, content_type=a.content_type)
        for a in message.attachments
    )


def to_inbound(message: discord.Message) -> InboundMessage:
    """Build the platform-neutral view of a Discord message."""
    reference = message.reference
    reply_to_id = str(reference.message_id) if reference is not None and reference.message_id else None
    return InboundMessage(
        id=str(message.id),
        content=strip_mentions(message.content),
        attachments=to_attachment_refs(message),
        reply_to_id=reply_to_id,
    )


class DiscordStatusMessage:
    """A bot message that can be edited with new text and image files."""

    def __init__(self, message: discord.Message) -> None:
        self.message = message
        self.id = str(message.id)

    async def edit(self, content: str, images: Sequence[NamedImage] = ()) -> str:
        kwargs = {"content": truncate_content(content)}
        if images:
            kwargs["attachments"] = [
                discord.File(io.BytesIO(image.data), filename=name) for name, image in images
            ]
        edited = await self.message.edit(**kwargs)
        if edited is not None:
            self.message = edited
            self.id = str(edited.id)
        return self.id


class DiscordChannel:
    """Channel operations scoped to the message being handled."""

    def __init__(self, message: discord.Message, bot_user_id: int) -> None:
        self.message = message
        self.bot_user_id = bot_user_id

    async def fetch_reply_target(self, message_id: str) -> Optional[ReplyTarget]:
        replied = await self.message.channel.fetch_message(int(message_id))
        return ReplyTarget(
            id=str(replied.id),
            from_bot=replied.author.id == self.bot_user_id,
            attachments=to_attachment_refs(replied),
        )

    async def reply(self, message_id: str, content: str) -> DiscordStatusMessage:
        if message_id != str(self.message.id):
            target = await self.message.channel.fetch_message(int(message_id))
        else:
            target = self.message
        sent = await target.reply(truncate_content(content))
        return DiscordStatusMessage(sent)

    async def send_typing(self) -> None:
        await self.message.channel.typing()


class ImagineBot(discord.Client):
    """Discord client that forwards messages mentioning the bot to the handler."""

    def __init__(self, handler: MessageHandler, *, image_model: str = "", text_model: str = "") -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.messages = True
        intents.dm_messages = True
        super().__init__(intents=intents)
        self.handler = handler
        self.image_model = image_model
        self.text_model = text_model

    async def on_ready(self) -> None:
        LOGGER.info("Logged in as %s", self.user)
        LOGGER.info("Image model: %s", self.image_model)
        LOGGER.info("Text model: %s", self.text_model)

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or self.user is None:
            return
        if not any(user.id == self.user.id for user in message.mentions):
            return
        await self.handler.handle(to_inbound(message), DiscordChannel(message, self.user.id))
