import asyncio

import aiohttp
import pytest

from core import (
    AuthenticationError,
    GenericApiError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from core.retry import (
    Fatal,
    HTTPStatusFailure,
    Transient,
    classify_failure,
    classify_status,
    compute_backoff_ms,
    retry_async,
)
from tests.fixtures.mock_openrouter import SleepRecorder


@pytest.mark.unit
def test_classify_status():
    assert isinstance(classify_status(401), Fatal)
    assert isinstance(classify_status(401).error, AuthenticationError)

    assert isinstance(classify_status(429), Transient)
    assert isinstance(classify_status(429).error, RateLimitError)

    for status in (500, 502, 503, 599):
        outcome = classify_status(status)
        assert isinstance(outcome, Transient)
        assert isinstance(outcome.error, NetworkError)
        assert outcome.error.status_code == status

    outcome = classify_status(400, 'model not found')
    assert isinstance(outcome, Fatal)
    assert isinstance(outcome.error, GenericApiError)
    assert outcome.error.message == 'OpenRouter API error: 400 - model not found'


@pytest.mark.unit
def test_classify_failure():
    assert isinstance(classify_failure(HTTPStatusFailure(429)), Transient)
    assert isinstance(classify_failure(asyncio.TimeoutError()), Transient)
    assert isinstance(classify_failure(aiohttp.ClientConnectionError('refused')), Transient)
    assert isinstance(classify_failure(ConnectionResetError()), Transient)

    validation = ValidationError('bad body')
    outcome = classify_failure(validation)
    assert isinstance(outcome, Fatal)
    assert outcome.error is validation

    outcome = classify_failure(KeyError('boom'))
    assert isinstance(outcome, Fatal)
    assert outcome.error.code == 'UNEXPECTED_ERROR'


@pytest.mark.unit
def test_compute_backoff_ms():
    no_jitter = lambda: 0.0
    assert compute_backoff_ms(1, rng=no_jitter) == 1000
    assert compute_backoff_ms(2, rng=no_jitter) == 2000
    assert compute_backoff_ms(3, rng=no_jitter) == 4000
    assert compute_backoff_ms(4, rng=no_jitter) == 8000
    assert compute_backoff_ms(10, rng=no_jitter) == 8000
    assert compute_backoff_ms(1, rng=lambda: 1.0) == 1500


@pytest.mark.unit
@pytest.mark.asyncio
async def test_retry_succeeds_after_transient_failures():
    sleep = SleepRecorder()
    attempts = []

    async def operation(attempt):
        attempts.append(attempt)
        if attempt < 3:
            raise HTTPStatusFailure(429)
        return 'done'

    result = await retry_async(operation, max_attempts=3, backoff=lambda n: n * 1000, sleep=sleep)
    assert result == 'done'
    assert attempts == [1, 2, 3]
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_retry_stops_on_fatal():
    sleep = SleepRecorder()
    attempts = []

    async def operation(attempt):
        attempts.append(attempt)
        raise HTTPStatusFailure(401)

    with pytest.raises(AuthenticationError) as exc:
        await retry_async(operation, max_attempts=5, sleep=sleep)
    assert attempts == [1]
    assert sleep.delays == []
    assert exc.value.attempts == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_retry_exhausted_raises_last_classified_error():
    sleep = SleepRecorder()

    async def operation(attempt):
        raise HTTPStatusFailure(503)

    with pytest.raises(NetworkError) as exc:
        await retry_async(operation, max_attempts=4, backoff=lambda n: 10, sleep=sleep)
    assert exc.value.attempts == 4
    assert len(sleep.delays) == 3
    assert isinstance(exc.value.__cause__, HTTPStatusFailure)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_single_attempt_never_sleeps():
    sleep = SleepRecorder()

    async def operation(attempt):
        raise asyncio.TimeoutError()

    with pytest.raises(NetworkError):
        await retry_async(operation, max_attempts=1, sleep=sleep)
    assert sleep.delays == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_waits_follow_backoff_per_attempt():
    sleep = SleepRecorder()
    seen = []

    def backoff(attempt):
        seen.append(attempt)
        return compute_backoff_ms(attempt, rng=lambda: 0.0)

    async def operation(attempt):
        raise HTTPStatusFailure(500)

    with pytest.raises(NetworkError):
        await retry_async(operation, max_attempts=4, backoff=backoff, sleep=sleep)
    assert seen == [1, 2, 3]
    assert sleep.delays == [1.0, 2.0, 4.0]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unexpected_exception_is_not_retried():
    sleep = SleepRecorder()
    attempts = []

    async def operation(attempt):
        attempts.append(attempt)
        raise KeyError('missing')

    with pytest.raises(GenericApiError) as exc:
        await retry_async(operation, max_attempts=3, sleep=sleep)
    assert exc.value.code == 'UNEXPECTED_ERROR'
    assert isinstance(exc.value.__cause__, KeyError)
    assert attempts == [1]
    assert sleep.delays == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_max_attempts_must_be_positive():
    async def operation(attempt):
        return 'never'

    with pytest.raises(ValueError):
        await retry_async(operation, max_attempts=0)
