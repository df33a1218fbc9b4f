"""Client helpers for driving the score gate from a game."""

from score_gate.client.api import ApiError, EndedGame, NonceChallenge, ScoreApiClient, TokenGrant
from score_gate.client.batching import ScoreSubmissionScheduler
from score_gate.client.orchestrator import (
    AuthSession,
    SessionOrchestrator,
    SessionStatus,
    StepResult,
)

__all__ = [
    "ApiError",
    "AuthSession",
    "EndedGame",
    "NonceChallenge",
    "ScoreApiClient",
    "ScoreSubmissionScheduler",
    "SessionOrchestrator",
    "SessionStatus",
    "StepResult",
    "TokenGrant",
]
