"""Map generation failures onto a small set of user-facing categories."""

from __future__ import annotations

import asyncio
import enum

import openai


class ErrorCategory(str, enum.Enum):
    MISSING_CREDENTIAL = "missing_credential"
    MODEL_UNAVAILABLE = "model_unavailable"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ErrorClassifier:
    """Classify exceptions raised while talking to the generative service.

    Typed client exceptions decide first; otherwise the error text is inspected.
    A rate-limit marker wins over a model mention, which wins over an API key
    mention, because quota errors from the service usually name the model too.
    """

    def __init__(self, image_model: str = "", text_model: str = "") -> None:
        self.image_model = image_model
        self.text_model = text_model

    def classify(self, error: BaseException) -> ErrorCategory:
        if isinstance(error, (asyncio.TimeoutError, openai.APITimeoutError)):
            return ErrorCategory.TIMEOUT
        if isinstance(error, openai.RateLimitError):
            return ErrorCategory.RATE_LIMITED
        if isinstance(error, openai.AuthenticationError):
            return ErrorCategory.MISSING_CREDENTIAL
        if isinstance(error, openai.NotFoundError):
            return ErrorCategory.MODEL_UNAVAILABLE

        text = str(error)
        if "429" in text or "Quota" in text:
            return ErrorCategory.RATE_LIMITED
        if "model" in text:
            return ErrorCategory.MODEL_UNAVAILABLE
        if "API key" in text:
            return ErrorCategory.MISSING_CREDENTIAL
        return ErrorCategory.UNKNOWN

    def user_message(self, category: ErrorCategory, *, image: bool = True) -> str:
        """Return the status text shown to the user for a failure category."""
        model = self.image_model if image else self.text_model
        if category is ErrorCategory.MISSING_CREDENTIAL:
            return "❌ Invalid or missing API key. Ask the bot operator to set OPENAI_API_KEY."
        if category is ErrorCategory.MODEL_UNAVAILABLE:
            return f'❌ Model "{model}" not found or not accessible. Check your API access.'
        if category is ErrorCategory.RATE_LIMITED:
            return (
                "❌ **Quota Exceeded / Rate Limited**\n"
                'The API returned a "Too Many Requests" error. This usually means:\n'
                f"1. You are on the free tier and this model ({model}) is not available for free.\n"
                "2. Or you have hit the rate limit for the minute/day.\n\n"
                "Please check the billing settings of the API account."
            )
        if category is ErrorCategory.TIMEOUT:
            return "❌ The generation service took too long to answer. Please try again."
        if image:
            return "❌ An error occurred during generation."
        return "❌ An error occurred while processing your message."

    def describe(self, error: BaseException, *, image: bool = True) -> str:
        return self.user_message(self.classify(error), image=image)
