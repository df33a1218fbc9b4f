# src/score_gate/api/v1/endpoints/game_session.py
"""Game session lifecycle endpoints with server-side anti-cheat validation.

Handlers are plain functions because store calls may block on Redis; FastAPI
runs them in its threadpool.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from score_gate.api.v1.dependencies import (
    ServicesDep,
    rate_limit_guard,
    require_session_token,
)
from score_gate.schemas.common import ErrorResponse
from score_gate.schemas.game import (
    ActionRequest,
    ActionResponse,
    EndSessionRequest,
    EndSessionResponse,
    SessionStatsOut,
    StartSessionRequest,
    StartSessionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/game-session",
    tags=["game-session"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)


@router.post(
    "/start",
    summary="Start a validated game session",
    response_model=StartSessionResponse,
    dependencies=[Depends(rate_limit_guard("start"))],
)
def start_session(
    payload: StartSessionRequest,
    services: ServicesDep,
) -> StartSessionResponse:
    require_session_token(payload, services)
    session_id = services.game_sessions.create(payload.player_address)
    return StartSessionResponse(game_session_id=session_id)


@router.post(
    "/action",
    summary="Submit one gameplay action for validation",
    response_model=ActionResponse,
    dependencies=[Depends(rate_limit_guard("action"))],
)
def submit_action(payload: ActionRequest, services: ServicesDep) -> ActionResponse:
    """Validate an action; rejections are flagged ``suspicious``."""
    require_session_token(payload, services)
    result = services.game_sessions.validate_action(
        payload.game_session_id,
        payload.player_address,
        payload.action.type,
        payload.action.data,
    )
    if result.error is not None:
        logger.warning(
            "Suspicious action %s rejected for session %s (%s): %s",
            payload.action.type,
            payload.game_session_id,
            payload.player_address,
            result.error.code.value,
        )
        raise result.error
    return ActionResponse(current_score=result.session.score if result.session else 0)


@router.post(
    "/end",
    summary="End a game session and return its final score",
    response_model=EndSessionResponse,
    dependencies=[Depends(rate_limit_guard("end"))],
)
def end_session(payload: EndSessionRequest, services: ServicesDep) -> EndSessionResponse:
    require_session_token(payload, services)
    result = services.game_sessions.end(payload.game_session_id, payload.player_address)
    if result.error is not None:
        raise result.error

    stats = services.game_sessions.stats(payload.game_session_id)
    return EndSessionResponse(
        final_score=result.final_score or 0,
        stats=SessionStatsOut(
            score=stats.score,
            enemies_killed=stats.enemies_killed,
            shots_fired=stats.shots_fired,
            accuracy=stats.accuracy,
            duration_ms=stats.duration_ms,
        ) if stats else None,
    )
