"""Environment-driven settings for the bot process."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or malformed."""


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class BotSettings:
    """Runtime configuration.

    Attributes:
        discord_token: Bot token for the chat platform.
        openai_api_key: Key for the generative service.
        openai_base_url: Optional OpenAI-compatible endpoint override.
        image_model: Model used for the image variants.
        text_model: Model used for conversations and prompt refinement.
        variant_count: Number of parallel image variants per request.
        heartbeat_interval: Seconds between typing signals while generating.
        generation_timeout: Per-variant timeout in seconds, or None for no limit.
        prompt_refinement: Whether raw prompts are refined before generation.
        session_max_entries: LRU bound per session map; 0 keeps everything.
        attachment_timeout: Timeout in seconds for attachment downloads.
    """

    discord_token: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    image_model: str = "gpt-5"
    text_model: str = "gpt-5-mini"
    variant_count: int = 3
    heartbeat_interval: float = 5.0
    generation_timeout: Optional[float] = None
    prompt_refinement: bool = True
    session_max_entries: int = 0
    attachment_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "BotSettings":
        """Build settings from the process environment."""
        settings = cls(
            discord_token=os.getenv("DISCORD_TOKEN"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            image_model=os.getenv("IMAGE_MODEL", cls.image_model),
            text_model=os.getenv("TEXT_MODEL", cls.text_model),
            variant_count=_env_int("VARIANT_COUNT", cls.variant_count),
            heartbeat_interval=_env_float("HEARTBEAT_INTERVAL_SECONDS", cls.heartbeat_interval),
            generation_timeout=_env_float("GENERATION_TIMEOUT_SECONDS", None),
            prompt_refinement=_env_bool("PROMPT_REFINEMENT", cls.prompt_refinement),
            session_max_entries=_env_int("SESSION_MAX_ENTRIES", cls.session_max_entries),
            attachment_timeout=_env_float("ATTACHMENT_TIMEOUT_SECONDS", cls.attachment_timeout),
        )
        if settings.variant_count < 1:
            raise ConfigurationError("VARIANT_COUNT must be at least 1")
        return settings

    def require_credentials(self) -> None:
        """Raise ConfigurationError unless both service credentials are present."""
        if not self.discord_token:
            raise ConfigurationError("DISCORD_TOKEN environment variable is not set")
        if not self.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable is not set")
