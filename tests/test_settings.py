import os
from unittest.mock import patch

import pytest

from utils.settings import BotSettings, ConfigurationError


def test_defaults_when_environment_is_empty():
    with patch.dict(os.environ, {}, clear=True):
        settings = BotSettings.from_env()

    assert settings.variant_count == 3
    assert settings.heartbeat_interval == 5.0
    assert settings.generation_timeout is None
    assert settings.prompt_refinement is True
    assert settings.openai_base_url is None


def test_values_are_read_from_environment():
    env = {
        "VARIANT_COUNT": "2",
        "GENERATION_TIMEOUT_SECONDS": "45",
        "PROMPT_REFINEMENT": "off",
        "IMAGE_MODEL": "gemini-2.5-flash-image",
    }
    with patch.dict(os.environ, env, clear=True):
        settings = BotSettings.from_env()

    assert settings.variant_count == 2
    assert settings.generation_timeout == 45.0
    assert settings.prompt_refinement is False
    assert settings.image_model == "gemini-2.5-flash-image"


def test_invalid_values_raise_configuration_error():
    with patch.dict(os.environ, {"VARIANT_COUNT": "zero"}, clear=True):
        with pytest.raises(ConfigurationError):
            BotSettings.from_env()
    with patch.dict(os.environ, {"VARIANT_COUNT": "0"}, clear=True):
        with pytest.raises(ConfigurationError):
            BotSettings.from_env()


def test_require_credentials():
    with pytest.raises(ConfigurationError, match="DISCORD_TOKEN"):
        BotSettings(openai_api_key="k").require_credentials()
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        BotSettings(discord_token="t").require_credentials()
    BotSettings(discord_token="t", openai_api_key="k").require_credentials()
