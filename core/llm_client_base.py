"""
OpenRouter LLM Client

Async client for the OpenRouter chat completions API.

Features:
- Configuration validated at construction (no client without an API key)
- Immutable per-call requests (ChatRequest), so one instance can serve
  concurrent calls
- Per-attempt timeout, retries with exponential backoff and jitter
- Typed errors (core.errors), exactly one per failed call
- Connection pooling per instance
- Request/response/metrics logging

Usage:
    from core import OpenRouterClient, ChatRequest

    client = OpenRouterClient()  # api key from OPENROUTER_API_KEY

    request = ChatRequest(
        system_message="You are a helpful assistant.",
        user_message="Explain photosynthesis in one sentence.",
    )
    text = await client.complete(request)
    await client.close()
"""

import json
import time
import asyncio
import aiohttp
from typing import Optional, Dict, Any, Callable, Awaitable

from config import get_model_context_length
from logs.logging_config import (
    get_llm_logger,
    log_llm_request,
    log_llm_response,
    log_metrics,
    log_context_usage,
)
from .client_config import ClientConfig, ModelParameters, resolve_client_config
from .errors import OpenRouterError, GenericApiError, ValidationError
from .request_builder import ChatRequest, build_request_payload
from .response_validator import ApiResponse, validate_api_response, extract_content
from .retry import HTTPStatusFailure, retry_async, compute_backoff_ms

logger = get_llm_logger()

BACKEND_NAME = "openrouter"


def _provider_message(body: str) -> str:
    """Pull `error.message` out of a provider error body, if there is one."""
    try:
        data = json.loads(body)
    except ValueError:
        return "Unknown error"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return "Unknown error"


class OpenRouterClient:
    """
    OpenRouter chat completion client.

    Each instance owns its configuration and (lazily created) aiohttp
    session. A session can be injected for tests or for sharing a
    connection pool; injected sessions are not closed by close().

    Example:
        async with OpenRouterClient(default_model="openai/gpt-4o-mini") as client:
            text = await client.send_message("Say hello", system_message="Be brief.")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        backoff: Callable[[int], float] = compute_backoff_ms,
        **overrides: Any,
    ):
        """
        Initialize the client.

        Args:
            config: Validated configuration. When omitted, one is resolved
                from `overrides` and the environment.
            session: Optional aiohttp session to use instead of creating one
            sleep: Coroutine used to wait between attempts
            backoff: attempt number -> delay in milliseconds
            **overrides: Keyword arguments for resolve_client_config()

        Raises:
            ConfigurationError: if the configuration is missing or invalid
        """
        self.config = config if config is not None else resolve_client_config(**overrides)
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self._backoff = backoff

        logger.debug(f"[OPENROUTER] Initialized | config={self.get_backend_info()}")

    async def __aenter__(self) -> "OpenRouterClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session for this instance."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            connector = aiohttp.TCPConnector(
                limit=self.config.pool_limit,
                limit_per_host=self.config.pool_limit
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector
            )
            self._owns_session = True
            logger.debug("[OPENROUTER] Session created")
        return self._session

    async def close(self):
        """Close this instance's session (only if the client created it)."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None
            logger.debug("[OPENROUTER] Session closed")

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        if self.config.app_url:
            headers["HTTP-Referer"] = self.config.app_url
        if self.config.app_title:
            headers["X-Title"] = self.config.app_title
        return headers

    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        """Build and self-validate the request body (no network I/O)."""
        return build_request_payload(
            request,
            default_model=self.config.default_model,
            default_parameters=self.config.default_model_parameters,
        )

    async def _attempt(self, payload: Dict[str, Any], attempt: int) -> Dict[str, Any]:
        """One HTTP POST, bounded by the configured timeout."""
        logger.info(
            f"[OPENROUTER] API request attempt {attempt}/{self.config.max_retries} | "
            f"model={payload['model']} | messages={len(payload['messages'])}"
        )

        session = await self.get_session()
        async with session.post(
            self.config.api_url,
            json=payload,
            headers=self._headers(),
            timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
        ) as r:
            body = await r.text()
            if not 200 <= r.status < 300:
                message = _provider_message(body)
                logger.warning(
                    f"[OPENROUTER] API error | attempt={attempt} | status={r.status} | message={message}"
                )
                raise HTTPStatusFailure(r.status, message)

        try:
            return json.loads(body)
        except ValueError as e:
            raise ValidationError("The API returned a response body that is not JSON") from e

    async def send(self, request: ChatRequest) -> ApiResponse:
        """
        Send a chat completion request and return the validated response.

        The payload is built and validated before the first attempt, so
        malformed requests never reach the network.

        Raises:
            ValidationError: malformed request or response
            AuthenticationError: credential rejected (never retried)
            RateLimitError: still rate limited after all attempts
            NetworkError: timeouts, connection failures or 5xx after all attempts
            GenericApiError: any other non-2xx status, or an unexpected failure
        """
        payload = self.build_payload(request)
        model_name = payload["model"]
        prompt = "\n\n".join(m["content"] for m in payload["messages"])

        request_id = log_llm_request(
            model=model_name,
            backend=BACKEND_NAME,
            task=request.task,
            prompt=prompt,
            temperature=payload.get("temperature"),
            max_tokens=payload.get("max_tokens"),
        )
        context_stats = log_context_usage(
            request_id=request_id,
            model=model_name,
            prompt=prompt,
            context_limit=get_model_context_length(model_name),
        )

        start_time = time.time()
        try:
            data = await retry_async(
                lambda attempt: self._attempt(payload, attempt),
                max_attempts=self.config.max_retries,
                backoff=self._backoff,
                sleep=self._sleep,
            )
            response = validate_api_response(data)

        except Exception as e:
            error = e if isinstance(e, OpenRouterError) else GenericApiError(
                "Unexpected error while communicating with the API",
                code="UNEXPECTED_ERROR",
            )
            latency_ms = (time.time() - start_time) * 1000
            attempts = error.attempts or 1

            log_llm_response(
                request_id=request_id,
                model=model_name,
                backend=BACKEND_NAME,
                response="",
                latency_ms=latency_ms,
                status="error",
                attempts=attempts,
                error_message=f"{error.code}: {error.message}",
            )
            log_metrics(
                request_id=request_id,
                model=model_name,
                backend=BACKEND_NAME,
                task=request.task,
                latency_ms=latency_ms,
                prompt_chars=len(prompt),
                response_chars=0,
                status="error",
                attempts=attempts,
                context_limit=context_stats["context_limit"],
                estimated_tokens=context_stats["estimated_tokens"],
                context_usage_percent=context_stats["usage_percent"],
            )
            if error is e:
                raise
            raise error from e

        latency_ms = (time.time() - start_time) * 1000
        content = extract_content(response)
        usage = response.usage

        log_llm_response(
            request_id=request_id,
            model=model_name,
            backend=BACKEND_NAME,
            response=content,
            latency_ms=latency_ms,
            status="success",
        )
        log_metrics(
            request_id=request_id,
            model=model_name,
            backend=BACKEND_NAME,
            task=request.task,
            latency_ms=latency_ms,
            prompt_chars=len(prompt),
            response_chars=len(content),
            status="success",
            prompt_tokens=usage.prompt_tokens if usage else None,
            completion_tokens=usage.completion_tokens if usage else None,
            total_tokens=usage.total_tokens if usage else None,
            context_limit=context_stats["context_limit"],
            estimated_tokens=context_stats["estimated_tokens"],
            context_usage_percent=context_stats["usage_percent"],
        )

        return response

    async def complete(self, request: ChatRequest) -> str:
        """Send a request and return the text of the first choice."""
        response = await self.send(request)
        return extract_content(response)

    async def send_message(
        self,
        user_message: str,
        system_message: Optional[str] = None,
        response_format: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None,
        parameters: Optional[ModelParameters] = None,
        task: str = "chat",
    ) -> str:
        """
        Convenience wrapper: build a ChatRequest and return the reply text.

        Raises:
            ValidationError: if `user_message` is blank
        """
        if not user_message or not user_message.strip():
            raise ValidationError("User message cannot be empty")

        request = ChatRequest(
            user_message=user_message,
            system_message=system_message,
            response_format=response_format,
            model=model,
            parameters=parameters,
            task=task,
        )
        return await self.complete(request)

    def get_backend_info(self) -> Dict[str, Any]:
        """
        Get information about this client's configuration (API key redacted).

        Returns:
            Dictionary with backend configuration details
        """
        info = self.config.redacted()
        info["backend"] = BACKEND_NAME
        return info
