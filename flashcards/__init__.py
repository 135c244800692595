"""
Flashcards Module

Generates flashcard proposals from source text using the OpenRouter client.
"""

from .generator import FlashcardGenerator, generate_flashcards_from_text
from .parser import parse_flashcard_proposals
from .schemas import FlashcardProposal

__all__ = [
    "FlashcardGenerator",
    "generate_flashcards_from_text",
    "parse_flashcard_proposals",
    "FlashcardProposal",
]
