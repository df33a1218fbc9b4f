# src/score_gate/api/v1/endpoints/scores.py
"""Commit an ended session's validated score to the blockchain."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from score_gate.api.v1.dependencies import (
    ServicesDep,
    rate_limit_guard,
    require_session_token,
)
from score_gate.core.errors import (
    DuplicateRequestError,
    InvalidRequestError,
    SessionMismatchError,
    SessionNotFoundError,
    SessionStillActiveError,
)
from score_gate.core.security import addresses_match, is_valid_address
from score_gate.schemas.common import ErrorResponse
from score_gate.schemas.score import CommitScoreRequest, CommitScoreResponse
from score_gate.services.score_writer import map_write_error

logger = logging.getLogger(__name__)

TRANSACTIONS_PER_GAME = 1

router = APIRouter(
    tags=["scores"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)


@router.post(
    "/update-player-data",
    summary="Write an ended session's score on chain",
    response_model=CommitScoreResponse,
    dependencies=[Depends(rate_limit_guard("commit"))],
)
def commit_score(
    payload: CommitScoreRequest,
    services: ServicesDep,
) -> CommitScoreResponse:
    """Forward the server-computed score of an ended session to the writer.

    The score always comes from the game session, never from the client.
    Retries of the same (player, score, session) are collapsed by the
    deduplicator; a definitive upstream failure releases the claim so the
    client may re-drive the commit.
    """
    require_session_token(payload, services)
    if not is_valid_address(payload.player_address):
        raise InvalidRequestError("Invalid player address format")

    session = services.game_sessions.get(payload.game_session_id)
    if session is None:
        raise SessionNotFoundError()
    if not addresses_match(session.player_address, payload.player_address):
        raise SessionMismatchError("Game session belongs to different player", status_code=403)
    if session.is_active:
        raise SessionStillActiveError()

    score_amount = session.score
    writer = services.require_score_writer()
    request_id = services.dedup.generate_id(
        payload.player_address, score_amount, payload.game_session_id
    )
    if not services.dedup.claim(request_id):
        raise DuplicateRequestError()

    try:
        tx_hash = writer.update_player_data(
            payload.player_address,
            score_amount,
            TRANSACTIONS_PER_GAME,
        )
    except Exception as exc:
        failure = map_write_error(exc)
        if failure.definitive:
            services.dedup.release(request_id)
        logger.warning(
            "Score write for session %s failed (%s): %s",
            payload.game_session_id,
            failure.cause,
            exc,
        )
        raise failure from exc

    services.dedup.mark_complete(request_id, tx_hash)
    logger.info(
        "Committed score %d for %s (session %s): %s",
        score_amount,
        payload.player_address,
        payload.game_session_id,
        tx_hash,
    )
    return CommitScoreResponse(transaction_hash=tx_hash)
