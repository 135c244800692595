"""
Generation Store - Async Redis-based storage for generation metadata.

- save(): records a successful generation and returns its id
- log_error(): appends an error-audit record for a failed generation
- ids are allocated with INCR, so they are unique across workers
"""
import json
import hashlib
import redis.asyncio as redis
from datetime import datetime
from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict

from config import REDIS_HOST, REDIS_PORT, REDIS_DB
from logs.logging_config import get_llm_logger
from .config import (
    GENERATION_KEY_PREFIX,
    GENERATION_ERROR_LOG_MAX_ENTRIES,
    GENERATION_ERROR_MESSAGE_MAX_CHARS,
)

logger = get_llm_logger()


def create_source_text_hash(source_text: str) -> str:
    """MD5 hex digest used to spot repeated source texts."""
    return hashlib.md5(source_text.encode("utf-8")).hexdigest()


@dataclass
class GenerationRecord:
    """Metadata stored for each successful generation."""
    generation_id: int
    model: str
    source_text_hash: str
    source_text_length: int
    generated_count: int
    generation_duration: int       # milliseconds
    user_id: Optional[str] = None
    created_at: str = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "GenerationRecord":
        return cls(**json.loads(json_str))


@dataclass
class GenerationErrorRecord:
    """Audit record for a failed generation."""
    error_code: str
    error_message: str
    model: str
    source_text_hash: str
    source_text_length: int
    user_id: Optional[str] = None
    created_at: str = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now().isoformat()
        self.error_message = self.error_message[:GENERATION_ERROR_MESSAGE_MAX_CHARS]

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


class GenerationStore:
    """Async Redis-based store for generation metadata and error audits."""

    def __init__(
        self,
        host: str = REDIS_HOST,
        port: int = REDIS_PORT,
        db: int = REDIS_DB,
        client: Optional[redis.Redis] = None
    ):
        self._redis: Optional[redis.Redis] = client
        self._host = host
        self._port = port
        self._db = db
        self._prefix = GENERATION_KEY_PREFIX

    async def _get_redis(self) -> redis.Redis:
        """Get or create async Redis connection."""
        if self._redis is None:
            self._redis = redis.Redis(
                host=self._host,
                port=self._port,
                db=self._db,
                decode_responses=True
            )
            logger.info(f"[GENERATION_STORE] Initialized | host={self._host}:{self._port} | db={self._db}")
        return self._redis

    async def close(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.close()
            self._redis = None

    def _key(self, generation_id: int) -> str:
        return f"{self._prefix}:{generation_id}"

    @property
    def _id_counter_key(self) -> str:
        return f"{self._prefix}:next_id"

    @property
    def _error_log_key(self) -> str:
        return f"{self._prefix}:errors"

    async def save(
        self,
        model: str,
        source_text_hash: str,
        source_text_length: int,
        generated_count: int,
        generation_duration: int,
        user_id: Optional[str] = None
    ) -> GenerationRecord:
        """
        Record a successful generation.

        Returns:
            GenerationRecord with the allocated generation_id
        """
        r = await self._get_redis()
        generation_id = int(await r.incr(self._id_counter_key))

        record = GenerationRecord(
            generation_id=generation_id,
            model=model,
            source_text_hash=source_text_hash,
            source_text_length=source_text_length,
            generated_count=generated_count,
            generation_duration=generation_duration,
            user_id=user_id,
        )
        await r.set(self._key(generation_id), record.to_json())

        user_info = f" | user_id={user_id}" if user_id else ""
        logger.info(
            f"[GENERATION_STORE] Saved | generation_id={generation_id} | "
            f"count={generated_count} | duration_ms={generation_duration}{user_info}"
        )
        return record

    async def get(self, generation_id: int) -> Optional[GenerationRecord]:
        """Get a generation by id, or None if unknown."""
        r = await self._get_redis()
        json_str = await r.get(self._key(generation_id))

        if json_str:
            return GenerationRecord.from_json(json_str)

        logger.debug(f"[GENERATION_STORE] Not found | generation_id={generation_id}")
        return None

    async def log_error(self, record: GenerationErrorRecord) -> None:
        """Append an error-audit record, keeping the newest entries only."""
        r = await self._get_redis()
        await r.lpush(self._error_log_key, record.to_json())
        await r.ltrim(self._error_log_key, 0, GENERATION_ERROR_LOG_MAX_ENTRIES - 1)

        logger.info(f"[GENERATION_STORE] Error logged | code={record.error_code} | model={record.model}")


# Global store instance
_store: Optional[GenerationStore] = None


def get_generation_store() -> GenerationStore:
    """Get the global generation store instance."""
    global _store
    if _store is None:
        _store = GenerationStore()
    return _store


async def close_generation_store():
    """Close the global generation store connection."""
    global _store
    if _store:
        await _store.close()
        _store = None
