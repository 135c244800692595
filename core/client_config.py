"""
OpenRouter Client Configuration

Validates and normalizes client configuration at construction time.
No OpenRouterClient exists without a valid ClientConfig.

Usage:
    from core.client_config import resolve_client_config, ModelParameters

    config = resolve_client_config(
        default_model="openai/gpt-4o-mini",
        default_model_parameters=ModelParameters(temperature=0.3),
    )
"""
import os
from typing import Optional, Dict, Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from config import (
    OPENROUTER_API_KEY_ENV,
    OPENROUTER_API_URL,
    OPENROUTER_DEFAULT_MODEL,
    OPENROUTER_TIMEOUT_MS,
    OPENROUTER_MAX_RETRIES,
    OPENROUTER_APP_URL,
    OPENROUTER_APP_TITLE,
)
from logs.logging_config import get_llm_logger
from .errors import ConfigurationError

logger = get_llm_logger()

DEFAULT_POOL_LIMIT = 20


class ModelParameters(BaseModel):
    """Sampling parameters. All optional; unset values are not sent."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    temperature: Optional[float] = Field(None, ge=0, le=2)
    top_p: Optional[float] = Field(None, ge=0, le=1)
    frequency_penalty: Optional[float] = Field(None, ge=-2, le=2)
    presence_penalty: Optional[float] = Field(None, ge=-2, le=2)
    max_tokens: Optional[int] = Field(None, gt=0)

    def merged_with(self, overrides: Optional["ModelParameters"]) -> "ModelParameters":
        """Shallow merge; values set on `overrides` win."""
        if overrides is None:
            return self
        data = self.model_dump(exclude_none=True)
        data.update(overrides.model_dump(exclude_none=True))
        return ModelParameters(**data)


DEFAULT_MODEL_PARAMETERS = ModelParameters(
    temperature=0.7,
    top_p=1,
    frequency_penalty=0,
    presence_penalty=0,
    max_tokens=2000,
)


class ClientConfig(BaseModel):
    """Fully populated, validated OpenRouter client configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    api_key: str = Field(..., description="OpenRouter API key")
    api_url: str = Field(OPENROUTER_API_URL, description="Chat completions endpoint")
    timeout_ms: PositiveInt = Field(OPENROUTER_TIMEOUT_MS, description="Per-attempt timeout")
    max_retries: PositiveInt = Field(OPENROUTER_MAX_RETRIES, description="Total attempts per call")
    default_model: str = Field(OPENROUTER_DEFAULT_MODEL, min_length=1)
    default_model_parameters: ModelParameters = Field(default=DEFAULT_MODEL_PARAMETERS)

    # Attribution headers (HTTP-Referer / X-Title)
    app_url: Optional[str] = OPENROUTER_APP_URL
    app_title: Optional[str] = OPENROUTER_APP_TITLE

    pool_limit: PositiveInt = DEFAULT_POOL_LIMIT

    @field_validator("api_key")
    @classmethod
    def _api_key_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("API key is required")
        return value

    @field_validator("api_url")
    @classmethod
    def _api_url_absolute(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"'{value}' is not a valid absolute URL")
        return value

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def redacted(self) -> Dict[str, Any]:
        """Config as a dict that is safe to log."""
        data = self.model_dump()
        data["api_key"] = "[REDACTED]"
        return data


def resolve_client_config(
    api_key: Optional[str] = None,
    api_url: Optional[str] = None,
    timeout_ms: Optional[int] = None,
    max_retries: Optional[int] = None,
    default_model: Optional[str] = None,
    default_model_parameters: Optional[ModelParameters] = None,
    app_url: Optional[str] = None,
    app_title: Optional[str] = None,
    pool_limit: Optional[int] = None,
) -> ClientConfig:
    """
    Merge explicit settings with environment fallbacks and validate them.

    The API key is taken from `api_key` when given, otherwise from the
    OPENROUTER_API_KEY environment variable. Model parameters are merged
    over DEFAULT_MODEL_PARAMETERS.

    Raises:
        ConfigurationError: naming the first field that failed validation
    """
    if api_key is None:
        api_key = os.getenv(OPENROUTER_API_KEY_ENV, "")

    raw: Dict[str, Any] = {"api_key": api_key}
    optional = {
        "api_url": api_url,
        "timeout_ms": timeout_ms,
        "max_retries": max_retries,
        "default_model": default_model,
        "app_url": app_url,
        "app_title": app_title,
        "pool_limit": pool_limit,
    }
    raw.update({k: v for k, v in optional.items() if v is not None})

    try:
        if default_model_parameters is not None:
            raw["default_model_parameters"] = DEFAULT_MODEL_PARAMETERS.merged_with(
                ModelParameters.model_validate(default_model_parameters)
            )
        return ClientConfig(**raw)

    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = tuple(str(part) for part in first.get("loc", ()))
        if e.title == ModelParameters.__name__:
            loc = ("default_model_parameters",) + loc
        field = ".".join(loc) or "config"

        logger.error(
            f"[OPENROUTER] Invalid configuration | field={field} | error={first.get('msg')}"
        )

        if field == "api_key":
            raise ConfigurationError(
                f"Missing OpenRouter API key. Set {OPENROUTER_API_KEY_ENV} in your .env file",
                field=field,
            ) from e
        raise ConfigurationError(
            f"Invalid client configuration: {field}: {first.get('msg')}",
            field=field,
        ) from e
