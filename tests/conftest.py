import os
import functools
import pytest
from pathlib import Path

from dotenv import load_dotenv

# load test env first
env_path = Path(__file__).resolve().parents[1] / '.env.test'
if env_path.exists():
    load_dotenv(env_path)

os.environ.setdefault('OPENROUTER_API_KEY', 'test-key')
os.environ.setdefault('LOG_TO_FILES', 'false')

from core import OpenRouterClient, compute_backoff_ms
from tests.fixtures.mock_openrouter import MockResponse, MockSession, SleepRecorder, completion_body, flashcards_content
from tests.fixtures.mock_redis import MockAsyncRedis


SAMPLE_CARDS = [
    {'front': 'What is photosynthesis?', 'back': 'The process plants use to turn light into chemical energy.'},
    {'front': 'Where does photosynthesis happen?', 'back': 'In the chloroplasts.'},
    {'front': 'What pigment absorbs light?', 'back': 'Chlorophyll.'},
]


@pytest.fixture
def sample_cards():
    return [dict(card) for card in SAMPLE_CARDS]


@pytest.fixture
def source_text():
    sentence = 'Photosynthesis converts light energy into chemical energy stored in glucose. '
    return sentence * 20


@pytest.fixture
def mock_session():
    return MockSession(MockResponse(200, completion_body(flashcards_content(SAMPLE_CARDS))))


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def make_client(sleep_recorder):
    """Build a client around a mock session with deterministic backoff."""
    def _make(session, **overrides):
        overrides.setdefault('api_key', 'test-key')
        return OpenRouterClient(
            session=session,
            sleep=sleep_recorder,
            backoff=functools.partial(compute_backoff_ms, rng=lambda: 0.0),
            **overrides,
        )
    return _make


@pytest.fixture
def mock_redis():
    return MockAsyncRedis()
