from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from controllers.discord_controller import (
    DiscordChannel,
    DiscordStatusMessage,
    strip_mentions,
    to_inbound,
    truncate_content,
)
from tests.common import png_blob


def fake_message(content="", attachments=(), reference=None, message_id=10, author_id=1):
    message = Mock()
    message.id = message_id
    message.content = content
    message.attachments = list(attachments)
    message.reference = reference
    message.author = SimpleNamespace(id=author_id, bot=False)
    return message


def test_strip_mentions_removes_both_forms():
    assert strip_mentions("<@123> draw a cat <@!456>") == "draw a cat"
    assert strip_mentions(None) == ""


def test_truncate_content_keeps_short_text():
    assert truncate_content("short") == "short"
    truncated = truncate_content("x" * 2500)
    assert len(truncated) == 2000
    assert truncated.endswith("…")


def test_to_inbound_maps_reply_and_attachments():
    attachment = SimpleNamespace(url="https://cdn.test/a.png", filename="a.png", content_type="image/png")
    message = fake_message(
        content="<@99> make it pink",
        attachments=[attachment],
        reference=SimpleNamespace(message_id=42),
    )

    inbound = to_inbound(message)

    assert inbound.id == "10"
    assert inbound.content == "make it pink"
    assert inbound.reply_to_id == "42"
    assert inbound.attachments[0].content_type == "image/png"


def test_to_inbound_without_reply():
    assert to_inbound(fake_message(content="hi")).reply_to_id is None


async def test_fetch_reply_target_marks_bot_authorship():
    replied = fake_message(message_id=42, author_id=99)
    message = fake_message()
    message.channel.fetch_message = AsyncMock(return_value=replied)

    target = await DiscordChannel(message, bot_user_id=99).fetch_reply_target("42")

    message.channel.fetch_message.assert_awaited_once_with(42)
    assert target.id == "42"
    assert target.from_bot is True


async def test_status_edit_attaches_files_and_returns_id():
    sent = fake_message(message_id=77)
    sent.edit = AsyncMock(return_value=None)

    reply_id = await DiscordStatusMessage(sent).edit("done", [("generated_variant_1.png", png_blob())])

    assert reply_id == "77"
    kwargs = sent.edit.await_args.kwargs
    assert kwargs["content"] == "done"
    assert kwargs["attachments"][0].filename == "generated_variant_1.png"
