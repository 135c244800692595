import json

import pytest

from generations.generation_store import (
    GenerationErrorRecord,
    GenerationRecord,
    GenerationStore,
    create_source_text_hash,
)


@pytest.mark.unit
def test_source_text_hash_is_stable():
    assert create_source_text_hash('abc') == create_source_text_hash('abc')
    assert create_source_text_hash('abc') != create_source_text_hash('abd')
    assert len(create_source_text_hash('abc')) == 32


@pytest.mark.unit
@pytest.mark.asyncio
async def test_save_allocates_increasing_ids(mock_redis):
    store = GenerationStore(client=mock_redis)
    first = await store.save('m', 'h1', 1200, 3, 850, user_id='u1')
    second = await store.save('m', 'h2', 1500, 5, 900)

    assert (first.generation_id, second.generation_id) == (1, 2)
    stored = await store.get(1)
    assert stored == first
    assert stored.user_id == 'u1'


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_unknown_returns_none(mock_redis):
    assert await GenerationStore(client=mock_redis).get(99) is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_log_error_keeps_newest_first(mock_redis):
    store = GenerationStore(client=mock_redis)
    await store.log_error(GenerationErrorRecord('RATE_LIMIT', 'slow down', 'm', 'h', 1000))
    await store.log_error(GenerationErrorRecord('NETWORK_ERROR', 'down', 'm', 'h', 1000))

    entries = [json.loads(e) for e in await mock_redis.lrange('generation:errors', 0, -1)]
    assert [e['error_code'] for e in entries] == ['NETWORK_ERROR', 'RATE_LIMIT']


@pytest.mark.unit
def test_error_message_is_truncated():
    record = GenerationErrorRecord('API_ERROR', 'x' * 5000, 'm', 'h', 1000)
    assert len(record.error_message) == 1000


@pytest.mark.unit
def test_record_json_roundtrip():
    record = GenerationRecord(7, 'm', 'h', 1000, 4, 1200, user_id='u')
    assert GenerationRecord.from_json(record.to_json()) == record


@pytest.mark.unit
@pytest.mark.asyncio
async def test_close_releases_client(mock_redis):
    store = GenerationStore(client=mock_redis)
    await store.close()
    assert mock_redis.closed is True
