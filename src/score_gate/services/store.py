"""Key-value stores backing the gate's process-wide state.

Every stateful service (nonces, rate limits, game sessions, dedup records)
talks to a ``KeyValueStore`` rather than a module-level dict, so tests get an
isolated in-memory instance and a deployment can point the same services at
Redis.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from threading import RLock
from typing import Generic, Protocol, TypeVar

import redis
from pydantic import BaseModel
from redis.exceptions import LockError

from score_gate.core.errors import StoreBusyError
from score_gate.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

_DEFAULT_STRIPES = 64


class KeyValueStore(Protocol[RecordT]):
    """Minimal store contract shared by the in-memory and Redis backends."""

    def get(self, key: str) -> RecordT | None: ...

    def set(self, key: str, value: RecordT, ttl_ms: int | None = None) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...

    def lock(self, key: str) -> AbstractContextManager[object]: ...

    def sweep(self, is_expired: Callable[[RecordT], bool] | None = None) -> int: ...


class InMemoryStore(Generic[RecordT]):
    """Dictionary-backed store with striped per-key locks.

    Keys hash onto a fixed pool of re-entrant locks, so mutations on unrelated
    keys only contend when they land on the same stripe.
    """

    def __init__(self, *, clock: Clock = now_ms, stripes: int = _DEFAULT_STRIPES) -> None:
        self._clock = clock
        self._data: dict[str, tuple[RecordT, int | None]] = {}
        self._stripes = [RLock() for _ in range(max(1, stripes))]

    def _live(self, entry: tuple[RecordT, int | None]) -> bool:
        _, expires_at = entry
        return expires_at is None or expires_at > self._clock()

    def get(self, key: str) -> RecordT | None:
        entry = self._data.get(key)
        if entry is None or not self._live(entry):
            return None
        return entry[0]

    def set(self, key: str, value: RecordT, ttl_ms: int | None = None) -> None:
        expires_at = self._clock() + ttl_ms if ttl_ms is not None else None
        self._data[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return [key for key, entry in list(self._data.items()) if self._live(entry)]

    def lock(self, key: str) -> RLock:
        return self._stripes[hash(key) % len(self._stripes)]

    def sweep(self, is_expired: Callable[[RecordT], bool] | None = None) -> int:
        """Delete entries past their TTL or matching ``is_expired``.

        Iterates a snapshot of the keys and re-checks each entry under its
        lock before deleting, so concurrent writers are never clobbered.
        """
        removed = 0
        for key in list(self._data):
            with self.lock(key):
                entry = self._data.get(key)
                if entry is None:
                    continue
                if not self._live(entry) or (is_expired is not None and is_expired(entry[0])):
                    del self._data[key]
                    removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._data)


class RedisStore(Generic[RecordT]):
    """Redis-backed store serializing records with their pydantic model."""

    def __init__(
        self,
        client: redis.Redis,
        namespace: str,
        model: type[RecordT],
        *,
        lock_timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._namespace = namespace
        self._model = model
        self._lock_timeout = lock_timeout

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> RecordT | None:
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        return self._model.model_validate_json(raw)

    def set(self, key: str, value: RecordT, ttl_ms: int | None = None) -> None:
        self._client.set(self._key(key), value.model_dump_json(), px=ttl_ms)

    def delete(self, key: str) -> None:
        self._client.delete(self._key(key))

    def keys(self) -> list[str]:
        prefix = f"{self._namespace}:"
        found: list[str] = []
        for raw in self._client.scan_iter(match=f"{prefix}*"):
            name = raw.decode() if isinstance(raw, bytes) else str(raw)
            found.append(name[len(prefix):])
        return found

    @contextmanager
    def lock(self, key: str) -> Iterator[object]:
        """Hold the Redis lock for ``key``.

        Raises:
            StoreBusyError: If the lock is not acquired within ``lock_timeout``
        """
        lock = self._client.lock(
            f"lock:{self._namespace}:{key}",
            timeout=self._lock_timeout,
            blocking_timeout=self._lock_timeout,
        )
        try:
            acquired = lock.acquire()
        except LockError as exc:
            raise StoreBusyError() from exc
        if not acquired:
            logger.warning("Timed out waiting for lock on %s:%s", self._namespace, key)
            raise StoreBusyError()
        try:
            yield lock
        finally:
            try:
                lock.release()
            except LockError:
                logger.warning("Lock on %s:%s expired before release", self._namespace, key)

    def sweep(self, is_expired: Callable[[RecordT], bool] | None = None) -> int:
        """Delete records matching ``is_expired``; Redis expires TTL'd keys itself."""
        if is_expired is None:
            return 0
        removed = 0
        for key in self.keys():
            with self.lock(key):
                value = self.get(key)
                if value is not None and is_expired(value):
                    self.delete(key)
                    removed += 1
        return removed


StoreFactory = Callable[[str, type[BaseModel]], KeyValueStore]


def memory_store_factory(clock: Clock = now_ms) -> StoreFactory:
    """Return a factory producing isolated in-memory stores."""

    def _factory(namespace: str, model: type[BaseModel]) -> KeyValueStore:
        return InMemoryStore(clock=clock)

    return _factory


def redis_store_factory(redis_url: str) -> StoreFactory:
    """Return a factory producing namespaced stores on a shared Redis client."""
    client = redis.Redis.from_url(redis_url)
    logger.info("Using Redis store backend")

    def _factory(namespace: str, model: type[BaseModel]) -> KeyValueStore:
        return RedisStore(client, f"score-gate:{namespace}", model)

    return _factory
