"""
Chat Completion Request Builder

ChatRequest is the immutable per-call request descriptor: system/user
messages, optional structured-output schema, model and sampling
overrides. build_request_payload() turns it into the JSON body sent to
OpenRouter and re-validates that body against RequestPayload before any
network round trip.
"""
import copy
from dataclasses import dataclass, replace
from typing import Optional, Dict, Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .client_config import ModelParameters
from .errors import ValidationError


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(..., min_length=1)


class JsonSchemaSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    strict: Optional[bool] = None
    schema_: Dict[str, Any] = Field(..., alias="schema")


class ResponseFormat(BaseModel):
    type: Literal["json_schema"]
    json_schema: JsonSchemaSpec


class RequestPayload(BaseModel):
    """Shape of the chat completion body, checked before every send."""

    model_config = ConfigDict(extra="forbid")

    messages: List[ChatMessage] = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    response_format: Optional[ResponseFormat] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)
    top_p: Optional[float] = Field(None, ge=0, le=1)
    frequency_penalty: Optional[float] = Field(None, ge=-2, le=2)
    presence_penalty: Optional[float] = Field(None, ge=-2, le=2)
    max_tokens: Optional[int] = Field(None, gt=0)


def _require_text(value: Optional[str], label: str) -> None:
    if value is not None and (not isinstance(value, str) or not value.strip()):
        raise ValidationError(f"{label} cannot be empty")


def _first_error(e: PydanticValidationError) -> str:
    first = e.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg')}" if loc else first.get("msg", "invalid value")


@dataclass(frozen=True)
class ChatRequest:
    """
    Immutable description of one chat completion call.

    Blank messages are rejected when the request is created, so a
    request that exists never carries empty instructions. The with_*
    helpers return a new request and leave the original untouched.

    Example:
        request = (
            ChatRequest(system_message="You write flashcards.")
            .with_user_message("Photosynthesis is ...")
            .with_response_format(FLASHCARD_RESPONSE_SCHEMA)
        )
    """
    user_message: Optional[str] = None
    system_message: Optional[str] = None
    response_format: Optional[Dict[str, Any]] = None
    model: Optional[str] = None
    parameters: Optional[ModelParameters] = None
    task: str = "chat"

    def __post_init__(self):
        _require_text(self.system_message, "System message")
        _require_text(self.user_message, "User message")
        _require_text(self.model, "Model name")

        if self.parameters is not None and not isinstance(self.parameters, ModelParameters):
            try:
                parameters = ModelParameters.model_validate(self.parameters)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid model parameters: {_first_error(e)}") from e
            object.__setattr__(self, "parameters", parameters)

    def with_system_message(self, message: str) -> "ChatRequest":
        return replace(self, system_message=message)

    def with_user_message(self, message: str) -> "ChatRequest":
        return replace(self, user_message=message)

    def with_response_format(self, schema: Optional[Dict[str, Any]]) -> "ChatRequest":
        return replace(self, response_format=schema)

    def with_model(
        self,
        name: str,
        parameters: Optional[Union[ModelParameters, Dict[str, Any]]] = None,
    ) -> "ChatRequest":
        """Set the model; parameters are merged over any already on the request."""
        if parameters is None:
            return replace(self, model=name)
        if self.parameters is not None:
            try:
                parameters = self.parameters.merged_with(ModelParameters.model_validate(parameters))
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid model parameters: {_first_error(e)}") from e
        return replace(self, model=name, parameters=parameters)


def validate_request_payload(payload: Dict[str, Any]) -> RequestPayload:
    """
    Check a payload against the transport boundary constraints.

    Raises:
        ValidationError: if the payload would be rejected by the API contract
    """
    try:
        return RequestPayload.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Request validation failed: {_first_error(e)}") from e


def build_request_payload(
    request: ChatRequest,
    default_model: str,
    default_parameters: ModelParameters,
) -> Dict[str, Any]:
    """
    Build the chat completion JSON body for a request.

    - system message first, then user message; absent messages are omitted
    - sampling parameters: defaults merged with request overrides, unset ones omitted
    - response_format attached only when the request carries a schema

    The result depends only on its arguments, so identical inputs give
    identical payloads.

    Raises:
        ValidationError: if the built payload fails self-validation
    """
    messages: List[Dict[str, str]] = []
    if request.system_message:
        messages.append({"role": "system", "content": request.system_message})
    if request.user_message:
        messages.append({"role": "user", "content": request.user_message})

    payload: Dict[str, Any] = {
        "model": request.model or default_model,
        "messages": messages,
    }
    payload.update(default_parameters.merged_with(request.parameters).model_dump(exclude_none=True))

    if request.response_format:
        payload["response_format"] = copy.deepcopy(request.response_format)

    validate_request_payload(payload)
    return payload
