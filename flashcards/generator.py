"""
Core flashcard generation logic using the OpenRouter client.
"""
import logging
from typing import List, Optional

from core import (
    OpenRouterClient,
    ChatRequest,
    validate_required_field,
    validate_text_length,
)
from .config import FLASHCARDS_SOURCE_TEXT_MIN_CHARS, FLASHCARDS_SOURCE_TEXT_MAX_CHARS
from .llm_client import get_client
from .parser import parse_flashcard_proposals
from .prompts import (
    FLASHCARD_SYSTEM_PROMPT,
    FLASHCARD_RESPONSE_SCHEMA,
    get_flashcard_prompt,
)
from .schemas import FlashcardProposal

logger = logging.getLogger(__name__)


class FlashcardGenerator:
    """Generates flashcard proposals from source text."""

    def __init__(self, client: Optional[OpenRouterClient] = None, model: Optional[str] = None):
        """
        Initialize the generator.

        Args:
            client: OpenRouter client (module client if not specified)
            model: Model override (client default if not specified)
        """
        self.client = client or get_client()
        self.model = model or self.client.config.default_model

    def build_request(self, source_text: str) -> ChatRequest:
        """Request with the flashcard system prompt and structured output schema."""
        return (
            ChatRequest(system_message=FLASHCARD_SYSTEM_PROMPT, task="flashcards")
            .with_response_format(FLASHCARD_RESPONSE_SCHEMA)
            .with_model(self.model)
            .with_user_message(get_flashcard_prompt(source_text))
        )

    async def generate(self, source_text: str) -> List[FlashcardProposal]:
        """
        Generate flashcard proposals.

        Returns:
            At least one proposal

        Raises:
            ValidationError: blank or out-of-range input, malformed response, or no valid flashcards
            OpenRouterError: any other client failure
        """
        validate_required_field(source_text, "Source text", module_name="Flashcards")
        validate_text_length(
            source_text,
            FLASHCARDS_SOURCE_TEXT_MIN_CHARS,
            FLASHCARDS_SOURCE_TEXT_MAX_CHARS,
            module_name="Flashcards",
        )

        request = self.build_request(source_text)

        logger.info(f"[FLASHCARDS] Generating | chars={len(source_text)} | model={self.model}")

        content = await self.client.complete(request)
        proposals = parse_flashcard_proposals(content)

        logger.info(f"[FLASHCARDS] Generated | count={len(proposals)} | model={self.model}")
        return proposals


async def generate_flashcards_from_text(
    source_text: str,
    model: Optional[str] = None,
    client: Optional[OpenRouterClient] = None,
) -> List[FlashcardProposal]:
    """
    Convenience function to generate flashcard proposals from text.

    Args:
        source_text: Text to study
        model: Model to use (optional)
        client: OpenRouter client (optional)

    Returns:
        List of FlashcardProposal (never empty)
    """
    generator = FlashcardGenerator(client=client, model=model)
    return await generator.generate(source_text)
