"""
Prompts for flashcard generation.
"""
from .config import FLASHCARD_FRONT_MAX_CHARS, FLASHCARD_BACK_MAX_CHARS

FLASHCARD_SYSTEM_PROMPT = f"""You are an expert at writing educational flashcards. Your task is to analyze the provided text and produce a set of study flashcards.

Rules for writing flashcards:
1. Each flashcard holds one specific question (front) and a concise answer (back)
2. Questions must be clear and unambiguous
3. Answers must be concise but complete
4. Focus on the most important concepts, facts, dates and relationships
5. Avoid questions that are too general or trivial
6. Front of the card: at most {FLASHCARD_FRONT_MAX_CHARS} characters
7. Back of the card: at most {FLASHCARD_BACK_MAX_CHARS} characters

Generate between 3 and 10 flashcards depending on the amount of material."""

# Structured output schema sent as response_format
FLASHCARD_RESPONSE_SCHEMA = {
    "type": "json_schema",
    "json_schema": {
        "name": "flashcards_response",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "flashcards": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "front": {
                                "type": "string",
                                "description": f"Question or term on the front of the card (max {FLASHCARD_FRONT_MAX_CHARS} characters)",
                            },
                            "back": {
                                "type": "string",
                                "description": f"Answer or explanation on the back of the card (max {FLASHCARD_BACK_MAX_CHARS} characters)",
                            },
                        },
                        "required": ["front", "back"],
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["flashcards"],
            "additionalProperties": False,
        },
    },
}


def get_flashcard_prompt(source_text: str) -> str:
    """Generate the user prompt for a source text."""
    return f"""Analyze the following text and generate educational flashcards:

{source_text}"""
