"""Append-only decision records."""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Protocol

import redis

from relay_agent.pipeline.types import DecisionLogEntry, LoggedOutcome

if TYPE_CHECKING:
    from relay_agent.config import Settings

logger = logging.getLogger(__name__)


class DecisionLogError(RuntimeError):
    """Raised when a persisted log cannot be written or read."""


class DecisionRecorder(Protocol):
    def append(self, entry: DecisionLogEntry) -> None: ...

    def entries(self) -> list[DecisionLogEntry]: ...


def make_entry(input_text: str, outcome: LoggedOutcome) -> DecisionLogEntry:
    return DecisionLogEntry(
        input=input_text, outcome=outcome, timestamp=datetime.now(timezone.utc)
    )


class DecisionLog:
    """In-memory log; appends are serialized under a lock."""

    def __init__(self) -> None:
        self._entries: list[DecisionLogEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: DecisionLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def record(self, input_text: str, outcome: LoggedOutcome) -> DecisionLogEntry:
        entry = make_entry(input_text, outcome)
        self.append(entry)
        return entry

    def entries(self) -> list[DecisionLogEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisDecisionLog:
    """Decision log persisted as a Redis list of JSON entries."""

    def __init__(self, client: redis.Redis, key: str) -> None:
        self.redis = client
        self.key = key

    @classmethod
    def connect(cls, settings: Settings) -> RedisDecisionLog:
        client = redis.from_url(
            f"redis://{settings.redis_url}",
            password=settings.redis_password or None,
            db=settings.redis_db,
            decode_responses=True,
        )
        client.ping()
        return cls(client, settings.decision_log_key)

    def append(self, entry: DecisionLogEntry) -> None:
        try:
            self.redis.rpush(self.key, json.dumps(entry.to_dict()))
        except redis.RedisError as exc:
            raise DecisionLogError(f"failed to append decision: {exc}") from exc

    def record(self, input_text: str, outcome: LoggedOutcome) -> DecisionLogEntry:
        entry = make_entry(input_text, outcome)
        self.append(entry)
        return entry

    def entries(self) -> list[DecisionLogEntry]:
        try:
            raw = self.redis.lrange(self.key, 0, -1)
        except redis.RedisError as exc:
            raise DecisionLogError(f"failed to read decisions: {exc}") from exc
        try:
            return [DecisionLogEntry.from_dict(json.loads(item)) for item in raw]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise DecisionLogError(f"failed to parse decision log: {exc}") from exc

    def __len__(self) -> int:
        try:
            return int(self.redis.llen(self.key))
        except redis.RedisError as exc:
            raise DecisionLogError(f"failed to read decisions: {exc}") from exc

    def close(self) -> None:
        self.redis.close()


def create_decision_log(settings: Settings) -> DecisionRecorder:
    """Create the configured decision log backend."""
    if settings.decision_log_backend != "redis":
        return DecisionLog()
    try:
        log = RedisDecisionLog.connect(settings)
        logger.info("Using Redis decision log", extra={"redis_url": settings.redis_url})
        return log
    except redis.RedisError as exc:
        if settings.allow_memory_decision_log:
            logger.warning("Redis decision log unavailable, falling back to memory: %s", exc)
            return DecisionLog()
        raise DecisionLogError(f"redis decision log initialization failed: {exc}") from exc


def close_decision_log(log: Optional[DecisionRecorder]) -> None:
    close = getattr(log, "close", None)
    if callable(close):
        close()
