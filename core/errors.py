"""
OpenRouter Error Taxonomy

Closed set of typed failures raised by the OpenRouter client.
Every failed call surfaces exactly one of these; callers decide whether
to offer a retry by kind (see OpenRouterError.retryable), never by
inspecting HTTP status codes.

    ConfigurationError  CONFIG_ERROR      invalid/missing client configuration
    AuthenticationError AUTH_ERROR        credential rejected (HTTP 401)
    RateLimitError      RATE_LIMIT        HTTP 429 after all retries
    NetworkError        NETWORK_ERROR     timeout / connection failure / 5xx after all retries
    ValidationError     VALIDATION_ERROR  malformed request, response or model output
    GenericApiError     API_ERROR         any other non-2xx status (or UNEXPECTED_ERROR)
"""
from typing import Optional


class OpenRouterError(Exception):
    """Base class for all OpenRouter client failures."""

    default_message = "OpenRouter request failed"
    default_code = "OPENROUTER_ERROR"
    retryable = False

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status_code = status_code
        # Set by the retry driver to the number of attempts made
        self.attempts: Optional[int] = None
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serializable form used by API error responses."""
        return {"error": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, status_code={self.status_code!r}, message={self.message!r})"


class ConfigurationError(OpenRouterError):
    default_message = "Invalid OpenRouter client configuration"
    default_code = "CONFIG_ERROR"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthenticationError(OpenRouterError):
    default_message = "Invalid OpenRouter API key"
    default_code = "AUTH_ERROR"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, status_code=401)


class RateLimitError(OpenRouterError):
    default_message = "Too many requests to the API. Please try again shortly."
    default_code = "RATE_LIMIT"
    retryable = True

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, status_code=429)


class NetworkError(OpenRouterError):
    default_message = "Could not connect to the OpenRouter API"
    default_code = "NETWORK_ERROR"
    retryable = True

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code)


class ValidationError(OpenRouterError):
    default_message = "Invalid response from the API"
    default_code = "VALIDATION_ERROR"


class GenericApiError(OpenRouterError):
    default_message = "Unexpected error while communicating with the API"
    default_code = "API_ERROR"
