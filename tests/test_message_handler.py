from unittest.mock import AsyncMock, Mock

import pytest

from models.request_models import (
    ClarifyRequest,
    ImageRegenerationRequest,
    InboundMessage,
    NewImageRequest,
    ReplyTarget,
    TextContinuation,
)
from models.session_models import ConversationTurn, GenerationRecord, Role
from services.context_resolver import ContextResolver
from services.generation_orchestrator import GenerationOrchestrator
from services.message_handler import CLARIFY_MESSAGE, FAILURE_MESSAGE, MessageHandler
from services.prompt_composer import PromptComposer
from services.session_store import SessionStore
from services.text_conversation import TextConversation
from tests.common import FakeChannel, FakeImageGenerator, FakeTextGenerator, png_blob


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def image_generator():
    return FakeImageGenerator([(None, png_blob())])


@pytest.fixture
def text_generator():
    return FakeTextGenerator(answers=["Sure, in short: it is simple."])


@pytest.fixture
def handler(store, image_generator, text_generator):
    fetcher = Mock()
    fetcher.fetch_images = AsyncMock(return_value=[])
    orchestrator = GenerationOrchestrator(
        image_generator, PromptComposer(), store, fetcher=fetcher, heartbeat_interval=0.01
    )
    conversation = TextConversation(text_generator, store, heartbeat_interval=0.01)
    return MessageHandler(ContextResolver(store, fetcher=fetcher), orchestrator, conversation)


async def test_scenario_new_image_request(handler, store, image_generator):
    channel = FakeChannel()

    mode = await handler.handle(InboundMessage(id="u-1", content="draw a cyberpunk city"), channel)

    assert isinstance(mode, NewImageRequest)
    assert len(image_generator.calls) == 3
    reply_id = channel.last_status.id
    assert [name for name, _ in channel.last_status.images] == [
        "generated_variant_1.png",
        "generated_variant_2.png",
        "generated_variant_3.png",
    ]
    assert store.get_record(reply_id).prompt == "cyberpunk city"


async def test_scenario_regeneration_from_reply(handler, store, image_generator):
    stored = (png_blob((1, 2, 3)), png_blob((4, 5, 6)))
    store.put_record("bot-1", GenerationRecord("a dog", stored))
    channel = FakeChannel(targets={"bot-1": ReplyTarget(id="bot-1", from_bot=True)})

    mode = await handler.handle(InboundMessage(id="u-2", content="make it pink", reply_to_id="bot-1"), channel)

    assert isinstance(mode, ImageRegenerationRequest)
    assert mode.prompt == "a dog, make it pink"
    prompt, images = image_generator.calls[0]
    assert "<user_prompt>\na dog, make it pink\n</user_prompt>" in prompt
    assert images == stored
    assert store.get_record(channel.last_status.id).prompt == "a dog, make it pink"


async def test_scenario_text_continuation(handler, store, text_generator):
    store.put_thread("bot-1", [ConversationTurn(Role.USER, "explain TCP"), ConversationTurn(Role.MODEL, "TCP is...")])
    channel = FakeChannel(targets={"bot-1": ReplyTarget(id="bot-1", from_bot=True)})

    mode = await handler.handle(
        InboundMessage(id="u-3", content="can you simplify that?", reply_to_id="bot-1"), channel
    )

    assert isinstance(mode, TextContinuation)
    assert text_generator.replies[0][-1] == ConversationTurn(Role.USER, "can you simplify that?")
    assert len(text_generator.replies[0]) == 3


async def test_empty_content_gets_clarification(handler):
    channel = FakeChannel()

    mode = await handler.handle(InboundMessage(id="u-4", content=""), channel)

    assert isinstance(mode, ClarifyRequest)
    assert channel.last_status.content == CLARIFY_MESSAGE


async def test_unreachable_reply_target_degrades_to_fresh_request(handler, text_generator):
    channel = FakeChannel(fetch_error=RuntimeError("Missing Access"))

    await handler.handle(InboundMessage(id="u-5", content="hello", reply_to_id="x"), channel)

    assert text_generator.replies == [(ConversationTurn(Role.USER, "hello"),)]


async def test_unexpected_errors_are_reported_not_raised(handler):
    channel = FakeChannel()
    handler.resolver.resolve = AsyncMock(side_effect=RuntimeError("bug"))

    mode = await handler.handle(InboundMessage(id="u-6", content="hi"), channel)

    assert mode is None
    assert channel.last_status.content == FAILURE_MESSAGE
