"""
Core Module

OpenRouter client infrastructure shared by all modules:
- Error taxonomy
- Client configuration and validation
- Request builder, retry policy, response validation
- OpenRouterClient
"""

from .errors import (
    OpenRouterError,
    ConfigurationError,
    AuthenticationError,
    RateLimitError,
    NetworkError,
    ValidationError,
    GenericApiError,
)
from .client_config import (
    ClientConfig,
    ModelParameters,
    DEFAULT_MODEL_PARAMETERS,
    resolve_client_config,
)
from .request_builder import ChatRequest, RequestPayload, build_request_payload
from .response_validator import ApiResponse, validate_api_response, extract_content
from .retry import (
    Fatal,
    Transient,
    classify_status,
    classify_failure,
    compute_backoff_ms,
    retry_async,
)
from .llm_client_base import OpenRouterClient
from .validators import (
    validate_required_field,
    validate_text_length,
)

__all__ = [
    # Errors
    "OpenRouterError",
    "ConfigurationError",
    "AuthenticationError",
    "RateLimitError",
    "NetworkError",
    "ValidationError",
    "GenericApiError",
    # Configuration
    "ClientConfig",
    "ModelParameters",
    "DEFAULT_MODEL_PARAMETERS",
    "resolve_client_config",
    # Requests / responses
    "ChatRequest",
    "RequestPayload",
    "build_request_payload",
    "ApiResponse",
    "validate_api_response",
    "extract_content",
    # Retry policy
    "Fatal",
    "Transient",
    "classify_status",
    "classify_failure",
    "compute_backoff_ms",
    "retry_async",
    # Client
    "OpenRouterClient",
    # Validators
    "validate_required_field",
    "validate_text_length",
]
