"""
Pydantic schemas for flashcard proposals.
"""
from typing import Literal

from pydantic import BaseModel, Field

from .config import FLASHCARD_FRONT_MAX_CHARS, FLASHCARD_BACK_MAX_CHARS


class FlashcardProposal(BaseModel):
    """Unsaved flashcard produced by the model, pending user review."""
    front: str = Field(..., min_length=1, max_length=FLASHCARD_FRONT_MAX_CHARS, description="Question or term")
    back: str = Field(..., min_length=1, max_length=FLASHCARD_BACK_MAX_CHARS, description="Answer or explanation")
    source: Literal["ai-full"] = Field("ai-full", description="Origin of the proposal")
