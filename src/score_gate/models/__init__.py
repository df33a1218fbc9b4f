# src/score_gate/models/__init__.py
"""In-memory state records owned by the gate's stores."""

from .dedup import DedupRecord, DedupState
from .game import ActionType, GameAction, GameSession
from .nonce import Nonce
from .rate import RateLimitEntry

__all__ = [
    "ActionType",
    "DedupRecord",
    "DedupState",
    "GameAction",
    "GameSession",
    "Nonce",
    "RateLimitEntry",
]
