"""Platform-neutral views of inbound messages and the request modes they resolve to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from models.session_models import ConversationThread, ImageBlob


@dataclass(frozen=True)
class AttachmentRef:
    """Attachment announced by the chat platform, not yet downloaded.

    Attributes:
        url: Download location of the attachment.
        filename: Original filename, used for logging only.
        content_type: MIME type reported by the platform, if any.
    """

    url: str
    filename: str = "attachment"
    content_type: Optional[str] = None


@dataclass(frozen=True)
class InboundMessage:
    """A user message addressed to the bot, with mentions already stripped.

    Attributes:
        id: Platform id of the message.
        content: Mention-stripped text.
        attachments: Attachments on this message.
        reply_to_id: Id of the message this one replies to, if any.
    """

    id: str
    content: str
    attachments: Tuple[AttachmentRef, ...] = ()
    reply_to_id: Optional[str] = None


@dataclass(frozen=True)
class ReplyTarget:
    """The message an inbound message replies to."""

    id: str
    from_bot: bool
    attachments: Tuple[AttachmentRef, ...] = ()


@dataclass(frozen=True)
class ClarifyRequest:
    """Empty content; the bot asks what the user wants."""


@dataclass(frozen=True)
class NewImageRequest:
    prompt: str
    attachments: Tuple[AttachmentRef, ...] = ()


@dataclass(frozen=True)
class ImageRegenerationRequest:
    prompt: str
    reference_artifacts: Tuple[ImageBlob, ...] = ()


@dataclass(frozen=True)
class ReferenceImageRequest:
    prompt: str
    extra_images: Tuple[ImageBlob, ...] = ()
    attachments: Tuple[AttachmentRef, ...] = ()


@dataclass(frozen=True)
class NewTextConversation:
    content: str


@dataclass(frozen=True)
class TextContinuation:
    content: str
    anchor_id: str
    thread: ConversationThread = field(default_factory=tuple)


ImageRequest = Union[NewImageRequest, ImageRegenerationRequest, ReferenceImageRequest]
TextRequest = Union[NewTextConversation, TextContinuation]
RequestMode = Union[ClarifyRequest, NewImageRequest, ImageRegenerationRequest, ReferenceImageRequest, NewTextConversation, TextContinuation]
