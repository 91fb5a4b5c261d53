from __future__ import annotations

from typing import Optional

import redis
from pydantic import ValidationError

from newhire.config import get_settings
from newhire.logging import get_logger
from newhire.state import OnboardingState

logger = get_logger(__name__)

KEY_PREFIX = "onboarding:"
CLOSED_PREFIX = "onboarding-closed:"

_memory: dict[str, str] = {}
# sessions whose record was cleared by a disqualification
_closed: set[str] = set()


def _decode(session_id: str, payload: str | None) -> Optional[OnboardingState]:
    if not payload:
        return None
    try:
        return OnboardingState.model_validate_json(payload)
    except ValidationError:
        logger.warning("Discarding unreadable onboarding record for session %s", session_id, exc_info=True)
        return None


class MemorySessionStore:
    """Process-local store; records live as long as the server process."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id

    def load(self) -> Optional[OnboardingState]:
        return _decode(self.session_id, _memory.get(self.session_id))

    def save(self, state: OnboardingState) -> None:
        _memory[self.session_id] = state.model_dump_json()

    def clear(self) -> None:
        _memory.pop(self.session_id, None)
        _closed.add(self.session_id)

    def is_closed(self) -> bool:
        return self.session_id in _closed


class RedisSessionStore:
    """Redis-backed store that falls back to process memory when Redis is down."""

    def __init__(self, session_id: str, client: redis.Redis, ttl_seconds: int | None = None) -> None:
        self.session_id = session_id
        self.client = client
        self.ttl_seconds = ttl_seconds
        self._fallback = MemorySessionStore(session_id)

    @property
    def key(self) -> str:
        return f"{KEY_PREFIX}{self.session_id}"

    def load(self) -> Optional[OnboardingState]:
        try:
            raw = self.client.get(self.key)
        except redis.RedisError:
            logger.warning("Redis unavailable, loading session %s from memory", self.session_id, exc_info=True)
            return self._fallback.load()
        if not raw:
            return self._fallback.load()
        return _decode(self.session_id, raw)

    def save(self, state: OnboardingState) -> None:
        payload = state.model_dump_json()
        try:
            self.client.set(self.key, payload, ex=self.ttl_seconds)
        except redis.RedisError:
            logger.warning("Redis unavailable, keeping session %s in memory", self.session_id, exc_info=True)
            self._fallback.save(state)

    @property
    def closed_key(self) -> str:
        return f"{CLOSED_PREFIX}{self.session_id}"

    def clear(self) -> None:
        self._fallback.clear()
        try:
            self.client.delete(self.key)
            self.client.set(self.closed_key, "1", ex=self.ttl_seconds)
        except redis.RedisError:
            logger.warning("Redis unavailable, could not clear session %s", self.session_id, exc_info=True)

    def is_closed(self) -> bool:
        try:
            if self.client.exists(self.closed_key):
                return True
        except redis.RedisError:
            logger.warning("Redis unavailable, checking session %s in memory", self.session_id, exc_info=True)
        return self._fallback.is_closed()


def open_session_store(session_id: str) -> MemorySessionStore | RedisSessionStore:
    settings = get_settings()
    if not settings.redis_url:
        return MemorySessionStore(session_id)
    client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
    return RedisSessionStore(session_id, client, ttl_seconds=settings.session_ttl_seconds or None)
