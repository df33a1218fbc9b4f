"""Fixed-window request throttling keyed by client identity."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from score_gate.models import RateLimitEntry
from score_gate.services.store import InMemoryStore, KeyValueStore
from score_gate.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    max_requests: int
    window_ms: int = 60_000


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    reset_time: int


class RateLimiter:
    """Counts requests per client within fixed windows.

    One instance exists per endpoint category, each with its own store, so
    a client's action traffic never consumes its session-start allowance.
    """

    def __init__(
        self,
        name: str,
        default_rule: RateLimitRule,
        store: KeyValueStore[RateLimitEntry] | None = None,
        *,
        clock: Clock = now_ms,
    ) -> None:
        self.name = name
        self.default_rule = default_rule
        self._clock = clock
        self._store: KeyValueStore[RateLimitEntry] = store or InMemoryStore(clock=clock)

    def check(self, client_key: str, rule: RateLimitRule | None = None) -> RateLimitDecision:
        """Count one request for ``client_key`` and decide whether it may proceed."""
        rule = rule or self.default_rule
        now = self._clock()
        with self._store.lock(client_key):
            entry = self._store.get(client_key)
            if entry is None or now - entry.window_start >= rule.window_ms:
                entry = RateLimitEntry(
                    client_key=client_key,
                    window_start=now,
                    window_ms=rule.window_ms,
                    count=1,
                )
            else:
                entry = entry.model_copy(update={"count": entry.count + 1})
            reset_time = entry.window_start + rule.window_ms
            self._store.set(client_key, entry, ttl_ms=max(1, reset_time - now))

        allowed = entry.count <= rule.max_requests
        if not allowed:
            logger.warning(
                "Rate limit '%s' exceeded for %s (%d/%d)",
                self.name,
                client_key,
                entry.count,
                rule.max_requests,
            )
        return RateLimitDecision(allowed=allowed, reset_time=reset_time)

    def sweep(self) -> int:
        """Drop counters whose own window has elapsed."""
        now = self._clock()
        return self._store.sweep(lambda entry: now - entry.window_start >= entry.window_ms)
