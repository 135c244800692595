import asyncio
import json

import aiohttp
import pytest

from core import (
    AuthenticationError,
    ChatRequest,
    GenericApiError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from tests.fixtures.mock_openrouter import MockResponse, MockSession, completion_body


@pytest.mark.unit
@pytest.mark.asyncio
async def test_successful_call_sends_expected_request(make_client):
    session = MockSession(MockResponse(200, completion_body('Paris')))
    client = make_client(session)

    text = await client.send_message('Capital of France?', system_message='Answer in one word.')

    assert text == 'Paris'
    assert len(session.calls) == 1
    call = session.calls[0]
    assert call['url'] == 'https://openrouter.ai/api/v1/chat/completions'
    assert call['headers']['Authorization'] == 'Bearer test-key'
    assert call['headers']['Content-Type'] == 'application/json'
    assert call['headers']['HTTP-Referer'] == 'https://10xcards.app'
    assert call['headers']['X-Title'] == '10xCards'
    assert call['timeout'].total == 30.0
    assert call['json']['messages'][0] == {'role': 'system', 'content': 'Answer in one word.'}
    assert call['json']['messages'][1] == {'role': 'user', 'content': 'Capital of France?'}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_timeout_is_configurable(make_client):
    session = MockSession()
    client = make_client(session, timeout_ms=1500)
    await client.send_message('Hi')
    assert session.calls[0]['timeout'].total == 1.5


@pytest.mark.unit
@pytest.mark.asyncio
async def test_blank_message_rejected_before_send(make_client):
    session = MockSession()
    client = make_client(session)
    with pytest.raises(ValidationError):
        await client.send_message('   ')
    assert session.calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_payload_rejected_before_send(make_client):
    session = MockSession()
    client = make_client(session)
    with pytest.raises(ValidationError):
        await client.send(ChatRequest(user_message='Q', response_format={'type': 'text'}))
    assert session.calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_auth_error_is_not_retried(make_client, sleep_recorder):
    session = MockSession(MockResponse(401, {'error': {'message': 'No auth credentials found'}}))
    client = make_client(session, max_retries=3)

    with pytest.raises(AuthenticationError):
        await client.send_message('Hi')
    assert len(session.calls) == 1
    assert sleep_recorder.delays == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_rate_limit_retried_until_success(make_client, sleep_recorder):
    session = MockSession(
        MockResponse(429, {'error': {'message': 'slow down'}}),
        MockResponse(429, {'error': {'message': 'slow down'}}),
        MockResponse(200, completion_body('finally')),
    )
    client = make_client(session, max_retries=3)

    assert await client.send_message('Hi') == 'finally'
    assert len(session.calls) == 3
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_rate_limit_exhausted(make_client):
    session = MockSession(MockResponse(429, {'error': {'message': 'slow down'}}))
    client = make_client(session, max_retries=2)

    with pytest.raises(RateLimitError) as exc:
        await client.send_message('Hi')
    assert len(session.calls) == 2
    assert exc.value.attempts == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_server_error_exhausts_retries(make_client, sleep_recorder):
    session = MockSession(MockResponse(503, 'Service Unavailable'))
    client = make_client(session, max_retries=3)

    with pytest.raises(NetworkError) as exc:
        await client.send_message('Hi')
    assert len(session.calls) == 3
    assert exc.value.status_code == 503
    assert sleep_recorder.delays == [1.0, 2.0]
    assert sleep_recorder.delays == sorted(sleep_recorder.delays)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_other_status_is_generic_api_error(make_client):
    session = MockSession(MockResponse(400, {'error': {'message': 'model not found'}}))
    client = make_client(session)

    with pytest.raises(GenericApiError) as exc:
        await client.send_message('Hi')
    assert exc.value.code == 'API_ERROR'
    assert exc.value.status_code == 400
    assert 'model not found' in exc.value.message
    assert len(session.calls) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_timeout_and_connection_failures_are_retried(make_client):
    session = MockSession(
        asyncio.TimeoutError(),
        aiohttp.ClientConnectionError('refused'),
        MockResponse(200, completion_body('ok')),
    )
    client = make_client(session, max_retries=3)

    assert await client.send_message('Hi') == 'ok'
    assert len(session.calls) == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_persistent_timeout_becomes_network_error(make_client):
    session = MockSession(asyncio.TimeoutError())
    client = make_client(session, max_retries=2)

    with pytest.raises(NetworkError):
        await client.send_message('Hi')
    assert len(session.calls) == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_non_json_success_body_is_validation_error(make_client):
    session = MockSession(MockResponse(200, '<html>oops</html>'))
    client = make_client(session)

    with pytest.raises(ValidationError):
        await client.send_message('Hi')
    assert len(session.calls) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_choices_is_validation_error_and_not_retried(make_client):
    session = MockSession(MockResponse(200, {'choices': []}))
    client = make_client(session, max_retries=3)

    with pytest.raises(ValidationError):
        await client.send_message('Hi')
    assert len(session.calls) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unexpected_exception_is_wrapped(make_client):
    session = MockSession(RuntimeError('something odd'))
    client = make_client(session, max_retries=3)

    with pytest.raises(GenericApiError) as exc:
        await client.send_message('Hi')
    assert exc.value.code == 'UNEXPECTED_ERROR'
    assert len(session.calls) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_request_overrides_reach_payload(make_client):
    session = MockSession()
    client = make_client(session, default_model='openai/gpt-4o-mini')
    request = ChatRequest(user_message='Hi').with_model('anthropic/claude-3-haiku', {'temperature': 0.1})

    await client.complete(request)
    body = session.calls[0]['json']
    assert body['model'] == 'anthropic/claude-3-haiku'
    assert body['temperature'] == 0.1
    assert json.dumps(body)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_concurrent_calls_do_not_share_state(make_client):
    session = MockSession()
    client = make_client(session)

    await asyncio.gather(
        client.send_message('first', system_message='A'),
        client.send_message('second', system_message='B'),
    )
    sent = sorted((c['json']['messages'][0]['content'], c['json']['messages'][1]['content']) for c in session.calls)
    assert sent == [('A', 'first'), ('B', 'second')]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_injected_session_is_not_closed(make_client):
    session = MockSession()
    client = make_client(session)
    await client.close()
    assert session.closed is False
