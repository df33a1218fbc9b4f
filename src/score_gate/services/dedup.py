"""Idempotency guard for outbound score writes."""

from __future__ import annotations

import logging
from typing import Final

from score_gate.core.security import normalize_address
from score_gate.models import DedupRecord, DedupState
from score_gate.services.store import InMemoryStore, KeyValueStore
from score_gate.utils.clock import Clock, now_ms
from score_gate.utils.hash import blake3_hexdigest

logger = logging.getLogger(__name__)

DEDUP_TTL_MS: Final[int] = 5 * 60 * 1000


class RequestDeduplicator:
    """Collapses retried identical payout requests into a single write.

    Records expire after ``ttl_ms``; a retry arriving later is treated as a
    new request.
    """

    def __init__(
        self,
        store: KeyValueStore[DedupRecord] | None = None,
        *,
        ttl_ms: int = DEDUP_TTL_MS,
        clock: Clock = now_ms,
    ) -> None:
        self._clock = clock
        self._store: KeyValueStore[DedupRecord] = store or InMemoryStore(clock=clock)
        self.ttl_ms = ttl_ms

    @staticmethod
    def generate_id(player_address: str, amount: int, session_id: str) -> str:
        """Return the deterministic fingerprint of a payout request."""
        payload = f"{normalize_address(player_address)}-{amount}-{session_id}"
        return blake3_hexdigest(payload.encode())

    def _live(self, record: DedupRecord | None) -> bool:
        return record is not None and self._clock() - record.timestamp < self.ttl_ms

    def get(self, request_id: str) -> DedupRecord | None:
        record = self._store.get(request_id)
        return record if self._live(record) else None

    def is_duplicate(self, request_id: str) -> bool:
        """Return True if a live Processing or Complete record exists."""
        return self.get(request_id) is not None

    def mark_processing(self, request_id: str) -> None:
        with self._store.lock(request_id):
            self._put(DedupRecord(
                request_id=request_id,
                state=DedupState.PROCESSING,
                timestamp=self._clock(),
            ))

    def mark_complete(self, request_id: str, transaction_hash: str | None = None) -> None:
        with self._store.lock(request_id):
            self._put(DedupRecord(
                request_id=request_id,
                state=DedupState.COMPLETE,
                timestamp=self._clock(),
                transaction_hash=transaction_hash,
            ))

    def claim(self, request_id: str) -> bool:
        """Atomically mark ``request_id`` Processing unless a live record exists.

        Returns:
            True if the caller now owns the request; False for a duplicate.
        """
        with self._store.lock(request_id):
            if self._live(self._store.get(request_id)):
                logger.warning("Duplicate write request %s rejected", request_id)
                return False
            self._put(DedupRecord(
                request_id=request_id,
                state=DedupState.PROCESSING,
                timestamp=self._clock(),
            ))
        return True

    def release(self, request_id: str) -> None:
        """Forget a Processing record so a definitively failed write can be re-driven."""
        with self._store.lock(request_id):
            record = self._store.get(request_id)
            if record is not None and record.state is DedupState.PROCESSING:
                self._store.delete(request_id)

    def _put(self, record: DedupRecord) -> None:
        self._store.set(record.request_id, record, ttl_ms=self.ttl_ms)

    def sweep(self) -> int:
        return self._store.sweep(lambda record: not self._live(record))
