"""
Global Configuration

Shared settings used across all modules.
Module-specific settings are in each module's config.py file.

All settings can be overridden via environment variables or a .env file.
See .env.example for a complete list of configurable variables.
"""
import os
from dotenv import load_dotenv

# Load .env file before any os.getenv() calls
load_dotenv()
from functools import lru_cache

import tiktoken

# For airgapped systems, set TIKTOKEN_CACHE_DIR to a directory containing pre-cached encoding files.
try:
    _encoder = tiktoken.get_encoding("cl100k_base")  # GPT-4/Claude compatible
    TIKTOKEN_AVAILABLE = True
except Exception:
    TIKTOKEN_AVAILABLE = False
    _encoder = None

# =========================
# OpenRouter Configuration
# =========================

# The key itself is read at client construction (core.client_config), not at import
OPENROUTER_API_KEY_ENV = "OPENROUTER_API_KEY"
OPENROUTER_API_URL = os.getenv("OPENROUTER_API_URL", "https://openrouter.ai/api/v1/chat/completions")
OPENROUTER_DEFAULT_MODEL = os.getenv("OPENROUTER_DEFAULT_MODEL", "openai/gpt-4o-mini")
OPENROUTER_TIMEOUT_MS = int(os.getenv("OPENROUTER_TIMEOUT_MS", "30000"))
OPENROUTER_MAX_RETRIES = int(os.getenv("OPENROUTER_MAX_RETRIES", "3"))

# Attribution headers required by OpenRouter
OPENROUTER_APP_URL = os.getenv("OPENROUTER_APP_URL", "https://10xcards.app")
OPENROUTER_APP_TITLE = os.getenv("OPENROUTER_APP_TITLE", "10xCards")

# =========================
# Model Context Lengths
# =========================

MODEL_CONTEXT_LENGTHS = {
    "openai/gpt-4o-mini": 128000,
    "openai/gpt-4o": 128000,
    "anthropic/claude-3.5-haiku": 200000,
    "meta-llama/llama-3.1-8b-instruct": 131072,
}

DEFAULT_CONTEXT_LENGTH = 8192  # Fallback for unknown models

# Context usage warning thresholds (percentage)
CONTEXT_WARNING_THRESHOLD = 80
CONTEXT_ERROR_THRESHOLD = 95

# =========================
# Redis Configuration
# =========================

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB = int(os.getenv("REDIS_DB", "0"))


# =========================
# Utility Functions
# =========================

@lru_cache(maxsize=32)
def get_model_context_length(model: str) -> int:
    """Get context length for a model (cached)."""
    return MODEL_CONTEXT_LENGTHS.get(model, DEFAULT_CONTEXT_LENGTH)


def estimate_tokens(text: str) -> int:
    """
    Estimate token count using tiktoken if available, otherwise fallback to char-based estimation.

    tiktoken provides accurate token counts compatible with modern LLMs.
    Fallback uses ~4 chars per token approximation.
    """
    if TIKTOKEN_AVAILABLE and _encoder is not None:
        return len(_encoder.encode(text))
    # Fallback: ~4 chars per token (less accurate)
    return len(text) // 4
