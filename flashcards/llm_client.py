"""
Flashcards LLM Client

Module-specific OpenRouter client for flashcard generation.
The client is created on first use so that importing this module never
fails when OPENROUTER_API_KEY is missing; the first call does.
"""
from typing import Optional

from core import OpenRouterClient, ModelParameters
from .config import (
    FLASHCARDS_DEFAULT_MODEL,
    FLASHCARDS_TEMPERATURE,
    FLASHCARDS_MAX_TOKENS,
    FLASHCARDS_TIMEOUT_MS,
    FLASHCARDS_MAX_RETRIES,
)

_client: Optional[OpenRouterClient] = None


def get_client() -> OpenRouterClient:
    """
    Get or create the flashcards client instance.

    Raises:
        ConfigurationError: if the OpenRouter configuration is invalid
    """
    global _client
    if _client is None:
        _client = OpenRouterClient(
            default_model=FLASHCARDS_DEFAULT_MODEL,
            timeout_ms=FLASHCARDS_TIMEOUT_MS,
            max_retries=FLASHCARDS_MAX_RETRIES,
            default_model_parameters=ModelParameters(
                temperature=FLASHCARDS_TEMPERATURE,
                max_tokens=FLASHCARDS_MAX_TOKENS,
            ),
        )
    return _client


async def close_session():
    """Close the flashcards session. Call this on application shutdown."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
