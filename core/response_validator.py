"""
Chat Completion Response Validation

A 2xx response without usable content is a contract violation, not a
transient condition, so every failure here is a ValidationError and is
never retried.
"""
from typing import Optional, List, Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from logs.logging_config import get_llm_logger
from .errors import ValidationError

logger = get_llm_logger()


class ResponseMessage(BaseModel):
    content: Optional[str] = None
    role: str = "assistant"


class Choice(BaseModel):
    message: ResponseMessage
    finish_reason: Optional[str] = None


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ApiResponse(BaseModel):
    """Provider reply; usage counters are informational only."""
    choices: List[Choice] = Field(..., min_length=1)
    usage: Optional[Usage] = None


def validate_api_response(data: Any) -> ApiResponse:
    """
    Check the minimal response shape.

    Raises:
        ValidationError: if choices are missing or empty, or the first
            choice has no string message content
    """
    try:
        response = ApiResponse.model_validate(data)
    except PydanticValidationError as e:
        logger.error(f"[OPENROUTER] Response validation failed | errors={e.error_count()}")
        raise ValidationError("Invalid response structure from the API") from e

    extract_content(response)
    return response


def extract_content(response: ApiResponse) -> str:
    """Return the first choice's message content."""
    content = response.choices[0].message.content
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Empty response from the OpenRouter API")
    return content
