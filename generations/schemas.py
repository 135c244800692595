"""
Pydantic schemas for the generations API.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from flashcards.config import (
    FLASHCARDS_SOURCE_TEXT_MIN_CHARS,
    FLASHCARDS_SOURCE_TEXT_MAX_CHARS,
)
from flashcards.schemas import FlashcardProposal


class GenerateFlashcardsRequest(BaseModel):
    """Request to generate flashcard proposals from source text."""
    request_id: Optional[str] = Field(None, description="Request ID (generated if not provided)")
    source_text: str = Field(
        ...,
        description="Text to generate flashcards from",
        min_length=FLASHCARDS_SOURCE_TEXT_MIN_CHARS,
        max_length=FLASHCARDS_SOURCE_TEXT_MAX_CHARS,
    )
    model: Optional[str] = Field(None, description="Model to use (defaults to config)")
    user_id: Optional[str] = Field(None, description="User identifier for logging and ownership")


class GenerationCreateResponse(BaseModel):
    """Response with the stored generation id and the proposals to review."""
    request_id: str = Field(..., description="Unique request identifier")
    generation_id: int = Field(..., description="Opaque identifier of the stored generation")
    flashcards_proposals: List[FlashcardProposal] = Field(..., description="Proposals pending review")
    generated_count: int = Field(..., description="Number of proposals")
    model: str = Field(..., description="Model used for generation")


class ErrorResponse(BaseModel):
    """Error body returned for failed generations."""
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message, safe to display")
