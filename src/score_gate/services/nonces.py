"""Single-use challenge nonces for wallet sign-in."""

from __future__ import annotations

import logging
import secrets
from typing import Final

from score_gate.models import Nonce
from score_gate.services.store import InMemoryStore, KeyValueStore
from score_gate.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)

NONCE_TTL_MS: Final[int] = 5 * 60 * 1000


class NonceStore:
    """Issues nonces and consumes each at most once within its TTL."""

    def __init__(
        self,
        store: KeyValueStore[Nonce] | None = None,
        *,
        ttl_ms: int = NONCE_TTL_MS,
        clock: Clock = now_ms,
    ) -> None:
        self._clock = clock
        self._store: KeyValueStore[Nonce] = store or InMemoryStore(clock=clock)
        self.ttl_ms = ttl_ms

    def issue(self) -> Nonce:
        """Generate and remember a fresh 32-byte hex nonce."""
        nonce = Nonce(value=secrets.token_hex(32), issued_at=self._clock())
        self._store.set(nonce.value, nonce, ttl_ms=self.ttl_ms)
        return nonce

    def consume(self, value: str) -> bool:
        """Mark ``value`` used and return True iff it is known, unused and fresh.

        A rejected nonce is left untouched.
        """
        if not value:
            return False
        with self._store.lock(value):
            nonce = self._store.get(value)
            if nonce is None or nonce.used:
                return False
            if self._clock() - nonce.issued_at >= self.ttl_ms:
                return False
            self._store.set(
                value,
                nonce.model_copy(update={"used": True}),
                ttl_ms=self._remaining_ttl(nonce),
            )
        return True

    def _remaining_ttl(self, nonce: Nonce) -> int:
        return max(1, nonce.issued_at + self.ttl_ms - self._clock())

    def _expired(self, nonce: Nonce) -> bool:
        return self._clock() - nonce.issued_at >= self.ttl_ms

    def sweep(self) -> int:
        """Purge nonces older than the TTL, used or not."""
        removed = self._store.sweep(self._expired)
        if removed:
            logger.debug("Purged %d expired nonces", removed)
        return removed
