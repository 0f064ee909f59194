import asyncio
import logging
import os
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from controllers.discord_controller import ImagineBot
from services.attachment_fetcher import AttachmentFetcher
from services.context_resolver import ContextResolver
from services.error_classifier import ErrorClassifier
from services.generation_orchestrator import GenerationOrchestrator
from services.intent_classifier import IntentClassifier
from services.message_handler import MessageHandler
from services.openai.image_generator import ImageGenerator
from services.openai.text_generator import TextGenerator
from services.prompt_composer import PromptComposer
from services.session_store import SessionStore
from services.text_conversation import TextConversation
from utils.settings import BotSettings

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)


def build_message_handler(
    settings: BotSettings,
    openai_client: AsyncOpenAI,
    store: SessionStore,
    http_client: httpx.AsyncClient | None = None,
) -> MessageHandler:
    """
    Wire the message pipeline around shared clients and one session store.
    """
    errors = ErrorClassifier(image_model=settings.image_model, text_model=settings.text_model)
    fetcher = AttachmentFetcher(http_client, timeout=settings.attachment_timeout)
    text_generator = TextGenerator(openai_client, settings.text_model)
    orchestrator = GenerationOrchestrator(
        ImageGenerator(openai_client, settings.image_model),
        PromptComposer(text_generator, refine_enabled=settings.prompt_refinement),
        store,
        fetcher=fetcher,
        errors=errors,
        variant_count=settings.variant_count,
        heartbeat_interval=settings.heartbeat_interval,
        variant_timeout=settings.generation_timeout,
    )
    conversation = TextConversation(
        text_generator, store, errors=errors, heartbeat_interval=settings.heartbeat_interval
    )
    resolver = ContextResolver(store, IntentClassifier(), fetcher)
    return MessageHandler(resolver, orchestrator, conversation)


def _log_bot_exit(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        LOGGER.error("Discord bot stopped: %s", task.exception())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the OpenAI async client and a shared HTTP client for attachments
      - the in-memory session store
      - the Discord bot, started as a background task
    and attach them to `app.state`.
    """
    settings = BotSettings.from_env()
    settings.require_credentials()

    try:
        openai_client = AsyncOpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    http_client = httpx.AsyncClient(timeout=settings.attachment_timeout, follow_redirects=True)
    store = SessionStore(max_entries=settings.session_max_entries or None)
    handler = build_message_handler(settings, openai_client, store, http_client)
    bot = ImagineBot(handler, image_model=settings.image_model, text_model=settings.text_model)
    bot_task = asyncio.create_task(bot.start(settings.discord_token))
    bot_task.add_done_callback(_log_bot_exit)

    app.state.settings = settings
    app.state.openai_client = openai_client
    app.state.session_store = store
    app.state.bot = bot

    try:
        yield
    finally:
        await bot.close()
        bot_task.cancel()
        await asyncio.gather(bot_task, return_exceptions=True)
        await http_client.aclose()
        try:
            await openai_client.close()
        except Exception as exc:
            # Shutdown errors must not mask the original exit reason.
            LOGGER.warning("Failed to close OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        """
        Report whether the bot is connected and how much session state is held.
        """
        bot = getattr(request.app.state, "bot", None)
        store = getattr(request.app.state, "session_store", None)
        return {
            "ok": True,
            "bot_ready": bool(bot is not None and bot.is_ready()),
            "sessions": store.stats() if store is not None else None,
        }

    return app


app = create_app()
