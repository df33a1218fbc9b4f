# src/score_gate/services/__init__.py
"""Business logic services for the score gate."""

from .container import GateServices, build_services
from .dedup import RequestDeduplicator
from .game_session import GameLimits, GameSessionStore
from .nonces import NonceStore
from .rate_limit import RateLimiter, RateLimitRule
from .tokens import SessionTokenCodec

__all__ = [
    "GameLimits",
    "GameSessionStore",
    "GateServices",
    "NonceStore",
    "RateLimitRule",
    "RateLimiter",
    "RequestDeduplicator",
    "SessionTokenCodec",
    "build_services",
]
