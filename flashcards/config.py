"""
Flashcards Configuration

Module-specific settings for flashcard generation.
"""
import os

# =========================
# Model Settings
# =========================

FLASHCARDS_DEFAULT_MODEL = os.getenv(
    "FLASHCARDS_DEFAULT_MODEL", os.getenv("OPENROUTER_DEFAULT_MODEL", "openai/gpt-4o-mini")
)

# =========================
# LLM Settings for Flashcards
# =========================

FLASHCARDS_TEMPERATURE = float(os.getenv("FLASHCARDS_TEMPERATURE", "0.7"))
FLASHCARDS_MAX_TOKENS = int(os.getenv("FLASHCARDS_MAX_TOKENS", "2000"))

# =========================
# Connection Settings
# =========================

FLASHCARDS_TIMEOUT_MS = int(os.getenv("FLASHCARDS_TIMEOUT_MS", os.getenv("OPENROUTER_TIMEOUT_MS", "30000")))
FLASHCARDS_MAX_RETRIES = int(os.getenv("FLASHCARDS_MAX_RETRIES", os.getenv("OPENROUTER_MAX_RETRIES", "3")))

# =========================
# Proposal Limits
# =========================

FLASHCARD_FRONT_MAX_CHARS = 200
FLASHCARD_BACK_MAX_CHARS = 500

# Source tag for unedited model output
FLASHCARD_SOURCE_AI_FULL = "ai-full"

# =========================
# Source Text Limits
# =========================

FLASHCARDS_SOURCE_TEXT_MIN_CHARS = int(os.getenv("FLASHCARDS_SOURCE_TEXT_MIN_CHARS", "1000"))
FLASHCARDS_SOURCE_TEXT_MAX_CHARS = int(os.getenv("FLASHCARDS_SOURCE_TEXT_MAX_CHARS", "10000"))
