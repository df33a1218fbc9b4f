"""Game session schemas."""
from __future__ import annotations

from typing import Any

from pydantic import Field

from .common import AuthenticatedRequest, CamelModel


class StartSessionRequest(AuthenticatedRequest):
    pass


class StartSessionResponse(CamelModel):
    success: bool = True
    game_session_id: str
    message: str = "Game session started successfully"


class ActionPayload(CamelModel):
    """Client-reported gameplay event."""

    type: str = Field(..., description="shot_fired, enemy_killed or game_ended")
    data: dict[str, Any] | None = Field(None, description="Optional opaque event details")


class ActionRequest(AuthenticatedRequest):
    game_session_id: str = Field(..., min_length=1)
    action: ActionPayload


class ActionResponse(CamelModel):
    success: bool = True
    current_score: int
    message: str = "Action validated successfully"


class EndSessionRequest(AuthenticatedRequest):
    game_session_id: str = Field(..., min_length=1)


class SessionStatsOut(CamelModel):
    score: int
    enemies_killed: int
    shots_fired: int
    accuracy: float = Field(..., description="Kills per hundred shots, two decimals")
    duration_ms: int


class EndSessionResponse(CamelModel):
    success: bool = True
    final_score: int
    stats: SessionStatsOut | None = None
    message: str = "Game session ended successfully"
