"""
Generations Module

Provides:
- FastAPI endpoint that turns source text into flashcard proposals
- Redis-based storage for generation metadata and error audits
"""

from .generation_store import (
    get_generation_store,
    close_generation_store,
    create_source_text_hash,
    GenerationStore,
    GenerationRecord,
    GenerationErrorRecord,
)
from .service import router, generate_and_record

__all__ = [
    # Store
    "get_generation_store",
    "close_generation_store",
    "create_source_text_hash",
    "GenerationStore",
    "GenerationRecord",
    "GenerationErrorRecord",
    # Service
    "router",
    "generate_and_record",
]
