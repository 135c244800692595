"""
Generations Service

FastAPI endpoints for generating flashcard proposals from source text.
Successful generations are recorded in the generation store; failures
write an error-audit record before the error is returned.
"""
import time
import uuid
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.errors import (
    OpenRouterError,
    ConfigurationError,
    AuthenticationError,
    RateLimitError,
    NetworkError,
    ValidationError,
    GenericApiError,
)
from flashcards import generate_flashcards_from_text
from flashcards.config import (
    FLASHCARDS_DEFAULT_MODEL,
    FLASHCARDS_SOURCE_TEXT_MIN_CHARS,
    FLASHCARDS_SOURCE_TEXT_MAX_CHARS,
)
from logs.logging_config import RequestContext, UserContext
from .generation_store import (
    GenerationStore,
    GenerationErrorRecord,
    get_generation_store,
    create_source_text_hash,
)
from .schemas import GenerateFlashcardsRequest, GenerationCreateResponse, ErrorResponse

logger = logging.getLogger(__name__)

GENERATION_FAILED = "GENERATION_FAILED"

# Error kind -> HTTP status returned to the caller
ERROR_STATUS_CODES = {
    ValidationError: 422,
    RateLimitError: 429,
    NetworkError: 503,
    GenericApiError: 502,
    AuthenticationError: 500,
    ConfigurationError: 500,
}


def error_status_code(error: OpenRouterError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 500


async def record_generation_error(
    store: GenerationStore,
    error: Exception,
    model: str,
    source_text: str,
    user_id: Optional[str] = None,
) -> None:
    """
    Write an error-audit record.

    A failure to write the record is logged and dropped so it never
    replaces the error being reported.
    """
    code = error.code if isinstance(error, OpenRouterError) else GENERATION_FAILED
    try:
        await store.log_error(GenerationErrorRecord(
            error_code=code,
            error_message=str(error) or type(error).__name__,
            model=model,
            source_text_hash=create_source_text_hash(source_text),
            source_text_length=len(source_text),
            user_id=user_id,
        ))
    except Exception as log_error:
        logger.error(f"[GENERATIONS] Failed to store error audit record | code={code} | error={log_error}")


async def generate_and_record(
    store: GenerationStore,
    source_text: str,
    model: str,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> GenerationCreateResponse:
    """
    Generate proposals and record the generation.

    Raises:
        OpenRouterError: generation failed (audit record written)
        Exception: the store could not record the generation (audit record written)
    """
    start_time = time.time()
    try:
        proposals = await generate_flashcards_from_text(source_text, model=model)
        duration_ms = int((time.time() - start_time) * 1000)

        record = await store.save(
            model=model,
            source_text_hash=create_source_text_hash(source_text),
            source_text_length=len(source_text),
            generated_count=len(proposals),
            generation_duration=duration_ms,
            user_id=user_id,
        )
    except Exception as e:
        await record_generation_error(store, e, model, source_text, user_id)
        raise

    return GenerationCreateResponse(
        request_id=request_id or str(uuid.uuid4()),
        generation_id=record.generation_id,
        flashcards_proposals=proposals,
        generated_count=len(proposals),
        model=model,
    )


# Create router
router = APIRouter(prefix="/api/v1/generations", tags=["Generations"])


# =====================
# API Endpoints
# =====================

@router.post(
    "",
    response_model=GenerationCreateResponse,
    status_code=201,
    responses={
        422: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def create_generation_endpoint(
    request: GenerateFlashcardsRequest,
    store: GenerationStore = Depends(get_generation_store),
):
    """
    Generate flashcard proposals from source text.

    **Request Body:**
    - `request_id`: Request ID for tracking (generated if not provided)
    - `source_text`: Text to study (1000-10000 characters)
    - `model`: Model to use (optional)
    - `user_id`: User identifier (optional)

    **Returns:**
    - `generation_id`: Identifier to attach when saving accepted proposals
    - `flashcards_proposals`: Proposals with `front`, `back`, `source`
    - `generated_count`: Number of proposals
    """
    request_id = request.request_id or str(uuid.uuid4())
    model = request.model or FLASHCARDS_DEFAULT_MODEL

    async with RequestContext(request_id), UserContext(request.user_id):
        logger.info(
            f"[GENERATIONS] START | request_id={request_id} | "
            f"chars={len(request.source_text)} | model={model} | user_id={request.user_id}"
        )

        try:
            result = await generate_and_record(
                store,
                source_text=request.source_text,
                model=model,
                user_id=request.user_id,
                request_id=request_id,
            )

        except OpenRouterError as e:
            status_code = error_status_code(e)
            logger.error(
                f"[GENERATIONS] ERROR | request_id={request_id} | code={e.code} | "
                f"status={status_code} | error={e.message}"
            )
            return JSONResponse(status_code=status_code, content=e.to_dict())

        except Exception as e:
            logger.error(f"[GENERATIONS] ERROR | request_id={request_id} | error={str(e)}")
            return JSONResponse(
                status_code=500,
                content={"error": GENERATION_FAILED, "message": "Flashcard generation failed"},
            )

        logger.info(
            f"[GENERATIONS] END | request_id={request_id} | "
            f"generation_id={result.generation_id} | count={result.generated_count}"
        )
        return result


@router.get("/config")
async def get_generation_config():
    """
    Get the default generation configuration.

    **Returns:**
    - Default model and source text limits
    """
    return {
        "default_model": FLASHCARDS_DEFAULT_MODEL,
        "source_text_min_chars": FLASHCARDS_SOURCE_TEXT_MIN_CHARS,
        "source_text_max_chars": FLASHCARDS_SOURCE_TEXT_MAX_CHARS,
    }
