"""
Generations Configuration

Module-specific settings for generation metadata storage.
"""
import os

# =========================
# Redis Key Settings
# =========================

# Prefix for generation keys in Redis
GENERATION_KEY_PREFIX = os.getenv("GENERATION_KEY_PREFIX", "generation")

# =========================
# Error Audit Settings
# =========================

# Number of error-audit records kept (oldest are trimmed)
GENERATION_ERROR_LOG_MAX_ENTRIES = int(os.getenv("GENERATION_ERROR_LOG_MAX_ENTRIES", "10000"))

# Error message length stored in an audit record
GENERATION_ERROR_MESSAGE_MAX_CHARS = int(os.getenv("GENERATION_ERROR_MESSAGE_MAX_CHARS", "1000"))
