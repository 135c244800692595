"""
Retry Policy

Two independent pieces:
- classify_failure(): a pure function mapping an attempt failure to
  Fatal(error) or Transient(error). It decides WHAT is retryable.
- retry_async(): drives attempts with tenacity, retrying only failures
  the classifier calls Transient and waiting compute_backoff_ms()
  between them. It decides HOW retries are scheduled.

The classifier, backoff and sleep are arguments so both pieces can be
tested without a network or a real clock.
"""
import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar, Union

import aiohttp
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from logs.logging_config import get_llm_logger
from .errors import (
    OpenRouterError,
    AuthenticationError,
    RateLimitError,
    NetworkError,
    GenericApiError,
)

logger = get_llm_logger()

T = TypeVar("T")

# Exponential backoff: 1s, 2s, 4s, ... capped at 8s, plus 0-500ms jitter
BACKOFF_BASE_MS = 1000
BACKOFF_MAX_MS = 8000
BACKOFF_JITTER_MS = 500


class HTTPStatusFailure(Exception):
    """A non-2xx response, raised by an attempt for the classifier to judge."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        self.message = message
        super().__init__(f"HTTP {status}: {message}")


@dataclass(frozen=True)
class Fatal:
    """Stop now and raise `error`."""
    error: OpenRouterError


@dataclass(frozen=True)
class Transient:
    """Retry if attempts remain; raise `error` once they are exhausted."""
    error: OpenRouterError


Outcome = Union[Fatal, Transient]


def classify_status(status: int, message: str = "") -> Outcome:
    """Classify a non-2xx HTTP status."""
    if status == 401:
        return Fatal(AuthenticationError())
    if status == 429:
        return Transient(RateLimitError())
    if 500 <= status <= 599:
        return Transient(NetworkError(
            "The OpenRouter service is temporarily unavailable. Please try again.",
            status_code=status,
        ))
    return Fatal(GenericApiError(
        f"OpenRouter API error: {status} - {message or 'Unknown error'}",
        status_code=status,
    ))


def classify_failure(exc: BaseException) -> Outcome:
    """Classify any exception raised by a single attempt."""
    if isinstance(exc, HTTPStatusFailure):
        return classify_status(exc.status, exc.message)
    if isinstance(exc, OpenRouterError):
        return Fatal(exc)
    if isinstance(exc, asyncio.TimeoutError):
        return Transient(NetworkError("Timed out waiting for the OpenRouter API response"))
    if isinstance(exc, (aiohttp.ClientError, OSError)):
        return Transient(NetworkError(f"Could not connect to the OpenRouter API: {exc}"))
    return Fatal(GenericApiError(
        "Unexpected error while communicating with the API",
        code="UNEXPECTED_ERROR",
    ))


def compute_backoff_ms(
    attempt: int,
    base_ms: int = BACKOFF_BASE_MS,
    max_ms: int = BACKOFF_MAX_MS,
    jitter_ms: int = BACKOFF_JITTER_MS,
    rng: Callable[[], float] = random.random,
) -> float:
    """Delay before the attempt following `attempt` (1-indexed)."""
    return min(base_ms * (2 ** (attempt - 1)), max_ms) + rng() * jitter_ms


def _log_transient(max_attempts: int, classify: Callable[[BaseException], Outcome]):
    def before_sleep(retry_state: RetryCallState) -> None:
        error = classify(retry_state.outcome.exception()).error
        logger.warning(
            f"[OPENROUTER] Transient failure | attempt={retry_state.attempt_number}/{max_attempts} | "
            f"code={error.code} | retry_in_ms={retry_state.next_action.sleep * 1000:.0f}"
        )
    return before_sleep


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    max_attempts: int,
    classify: Callable[[BaseException], Outcome] = classify_failure,
    backoff: Callable[[int], float] = compute_backoff_ms,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run `operation(attempt)` until it succeeds, fails fatally, or
    `max_attempts` attempts have been made.

    Attempts never overlap: the next one starts only after the previous
    outcome is known and the backoff delay has elapsed.

    Raises:
        OpenRouterError: the classified error of the last failure, with
            `attempts` set to the number of attempts made
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        retry=retry_if_exception(lambda exc: isinstance(classify(exc), Transient)),
        wait=lambda retry_state: backoff(retry_state.attempt_number) / 1000,
        sleep=sleep,
        before_sleep=_log_transient(max_attempts, classify),
        reraise=True,
    )

    attempt_number = 0
    try:
        async for attempt in retrying:
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                return await operation(attempt_number)
    except Exception as exc:
        outcome = classify(exc)
        error = outcome.error
        error.attempts = attempt_number

        if isinstance(outcome, Fatal):
            logger.error(
                f"[OPENROUTER] Fatal failure | attempt={attempt_number}/{max_attempts} | "
                f"code={error.code} | error={error.message}"
            )
        else:
            logger.error(
                f"[OPENROUTER] Retries exhausted | attempts={attempt_number} | "
                f"code={error.code} | error={error.message}"
            )
        if error is exc:
            raise
        raise error from exc
