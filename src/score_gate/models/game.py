# src/score_gate/models/game.py
"""Game session state tracked by the server for anti-cheat validation."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActionType(str, Enum):
    """Kinds of actions a game session records."""

    SHOT_FIRED = "shot_fired"
    ENEMY_KILLED = "enemy_killed"
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"


class GameAction(BaseModel):
    """Single validated action; immutable once appended to a session."""

    type: ActionType
    timestamp: int
    data: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True)


class GameSession(BaseModel):
    """Server-side record of one play session.

    Mutated only by ``GameSessionStore`` while holding the session's key lock.
    ``actions`` is append-only and ordered by ``timestamp``.
    """

    player_address: str
    session_id: str
    start_time: int
    last_action_time: int
    actions: list[GameAction] = Field(default_factory=list)
    score: int = 0
    enemies_killed: int = 0
    shots_fired: int = 0
    is_active: bool = True

    def recent_count(self, action_type: ActionType, now: int, span_ms: int = 1000) -> int:
        """Count actions of ``action_type`` newer than ``span_ms`` before ``now``."""
        return sum(
            1
            for action in self.actions
            if action.type == action_type and now - action.timestamp < span_ms
        )
