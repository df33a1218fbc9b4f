"""Wiring of the gate's services from settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from score_gate.core.errors import ServerMisconfiguredError
from score_gate.core.settings import Settings
from score_gate.models import DedupRecord, GameSession, Nonce, RateLimitEntry
from score_gate.services.dedup import RequestDeduplicator
from score_gate.services.game_session import GameLimits, GameSessionStore
from score_gate.services.maintenance import MaintenanceWorker
from score_gate.services.nonces import NonceStore
from score_gate.services.rate_limit import RateLimiter, RateLimitRule
from score_gate.services.score_writer import ScoreWriter, Web3ScoreWriter
from score_gate.services.store import StoreFactory, memory_store_factory, redis_store_factory
from score_gate.services.tokens import SessionTokenCodec
from score_gate.utils.clock import Clock, now_ms


@dataclass
class GateServices:
    """Process-wide service instances shared by every request."""

    settings: Settings
    nonces: NonceStore
    tokens: SessionTokenCodec
    rate_limiters: dict[str, RateLimiter]
    game_sessions: GameSessionStore
    dedup: RequestDeduplicator
    maintenance: MaintenanceWorker
    clock: Clock = now_ms
    score_writer: ScoreWriter | None = field(default=None)

    def rate_limiter(self, name: str) -> RateLimiter:
        return self.rate_limiters[name]

    def require_score_writer(self) -> ScoreWriter:
        """Return the writer, building the web3 adapter on first use."""
        if self.score_writer is None:
            s = self.settings
            if not (s.rpc_url and s.contract_address and s.wallet_private_key):
                raise ServerMisconfiguredError()
            self.score_writer = Web3ScoreWriter(s.rpc_url, s.contract_address, s.wallet_private_key)
        return self.score_writer


def build_services(
    settings: Settings,
    *,
    clock: Clock = now_ms,
    store_factory: StoreFactory | None = None,
    score_writer: ScoreWriter | None = None,
) -> GateServices:
    """Construct every service with stores from the configured backend."""
    if store_factory is None:
        if settings.store_backend == "redis":
            store_factory = redis_store_factory(settings.redis_url)
        else:
            store_factory = memory_store_factory(clock)

    nonces = NonceStore(
        store_factory("nonces", Nonce),
        ttl_ms=settings.nonce_ttl_ms,
        clock=clock,
    )
    tokens = SessionTokenCodec(
        settings.session_secret,
        bucket_ms=settings.token_bucket_ms,
        window_ms=settings.token_window_ms,
        clock=clock,
    )
    rate_limiters = {
        name: RateLimiter(
            name,
            RateLimitRule(max_requests=limit, window_ms=settings.rate_limit_window_ms),
            store_factory(f"rate:{name}", RateLimitEntry),
            clock=clock,
        )
        for name, limit in settings.rate_limits.items()
    }
    game_sessions = GameSessionStore(
        store_factory("game-sessions", GameSession),
        limits=GameLimits(
            max_shots_per_second=settings.max_shots_per_second,
            max_kills_per_second=settings.max_kills_per_second,
            min_time_between_actions_ms=settings.min_time_between_actions_ms,
            max_session_duration_ms=settings.max_session_duration_ms,
            points_per_kill=settings.points_per_kill,
            max_score_per_session=settings.max_score_per_session,
        ),
        clock=clock,
    )
    dedup = RequestDeduplicator(
        store_factory("dedup", DedupRecord),
        ttl_ms=settings.dedup_ttl_ms,
        clock=clock,
    )
    sweeps = {
        "nonces": nonces.sweep,
        "game_sessions": game_sessions.sweep,
        "dedup": dedup.sweep,
        **{f"rate:{name}": limiter.sweep for name, limiter in rate_limiters.items()},
    }
    return GateServices(
        settings=settings,
        nonces=nonces,
        tokens=tokens,
        rate_limiters=rate_limiters,
        game_sessions=game_sessions,
        dedup=dedup,
        maintenance=MaintenanceWorker(sweeps, settings.sweep_interval_seconds),
        clock=clock,
        score_writer=score_writer,
    )
