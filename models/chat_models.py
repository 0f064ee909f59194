"""Interfaces the chat-platform adapter provides to the message pipeline."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

from models.request_models import ReplyTarget
from models.session_models import ImageBlob

NamedImage = Tuple[str, ImageBlob]


class StatusMessage(Protocol):
    """A bot message that is edited as a request progresses."""

    id: str

    async def edit(self, content: str, images: Sequence[NamedImage] = ()) -> str:
        """Replace the message content, optionally attaching images.

        Returns the id of the message that now carries the content.
        """
        ...


class ChatChannel(Protocol):
    """The channel an inbound message arrived on."""

    async def fetch_reply_target(self, message_id: str) -> Optional[ReplyTarget]:
        ...

    async def reply(self, message_id: str, content: str) -> StatusMessage:
        ...

    async def send_typing(self) -> None:
        ...
