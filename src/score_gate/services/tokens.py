"""Stateless, time-windowed session tokens.

A token is a keyed BLAKE3 digest of the wallet address and a 30-second bucket
start. Nothing is stored: validation recomputes the digest for every bucket
in the trailing window and accepts on any match.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Final

from score_gate.core.security import normalize_address
from score_gate.utils.clock import Clock, now_ms
from score_gate.utils.hash import derive_key, keyed_hexdigest

BUCKET_MS: Final[int] = 30_000
VALIDITY_WINDOW_MS: Final[int] = 5 * 60 * 1000


@dataclass(frozen=True)
class IssuedToken:
    """Token handed to a client after a successful signature exchange."""

    token: str
    expires_at: int


class SessionTokenCodec:
    """Derives and validates session tokens from a server secret."""

    def __init__(
        self,
        secret: str | bytes,
        *,
        bucket_ms: int = BUCKET_MS,
        window_ms: int = VALIDITY_WINDOW_MS,
        clock: Clock = now_ms,
    ) -> None:
        if not secret:
            raise ValueError("Session token secret must be provided")
        self._key = derive_key(secret)
        self.bucket_ms = bucket_ms
        self.window_ms = window_ms
        self._clock = clock

    def bucket_start(self, timestamp_ms: int) -> int:
        """Return the start of the bucket containing ``timestamp_ms``."""
        return (timestamp_ms // self.bucket_ms) * self.bucket_ms

    def derive(self, address: str, bucket: int) -> str:
        """Return the token for ``address`` in the bucket starting at ``bucket``."""
        payload = f"{normalize_address(address)}:{bucket}".encode()
        return keyed_hexdigest(self._key, payload)

    def issue(self, address: str) -> IssuedToken:
        """Issue a token for the current bucket."""
        bucket = self.bucket_start(self._clock())
        return IssuedToken(
            token=self.derive(address, bucket),
            expires_at=bucket + self.window_ms,
        )

    def validate(self, token: str, address: str, window_ms: int | None = None) -> bool:
        """Return True if ``token`` matches any bucket starting within the window.

        Args:
            token: Hex token supplied by the client.
            address: Wallet address the token must be bound to.
            window_ms: Trailing window; defaults to the codec's window.

        Returns:
            True on a match for some bucket start in ``[now - window_ms, now]``.
        """
        # Tokens and hex addresses are ASCII; compare_digest rejects other str input.
        if not token or not address or not (token.isascii() and address.isascii()):
            return False
        window = self.window_ms if window_ms is None else window_ms
        now = self._clock()
        bucket = self.bucket_start(now)
        oldest = now - window
        matched = False
        while bucket >= oldest:
            # Compare every candidate so timing does not reveal the bucket.
            if secrets.compare_digest(self.derive(address, bucket), token):
                matched = True
            bucket -= self.bucket_ms
        return matched
