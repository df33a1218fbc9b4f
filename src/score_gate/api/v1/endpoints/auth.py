# src/score_gate/api/v1/endpoints/auth.py
"""Wallet authentication endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from score_gate.api.v1.dependencies import ServicesDep, require_same_origin
from score_gate.core.errors import InvalidRequestError, InvalidTokenError
from score_gate.core.security import challenge_message, is_valid_address, verify_signature
from score_gate.schemas.auth import (
    NonceRequest,
    NonceResponse,
    SessionTokenRequest,
    SessionTokenResponse,
)
from score_gate.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["authentication"],
    dependencies=[Depends(require_same_origin)],
    responses={403: {"model": ErrorResponse}},
)


@router.post(
    "/get-nonce",
    summary="Issue a single-use sign-in challenge",
    response_model=NonceResponse,
)
def get_nonce(payload: NonceRequest, services: ServicesDep) -> NonceResponse:
    """Return a fresh nonce and the exact message the wallet must sign."""
    nonce = services.nonces.issue()
    return NonceResponse(
        nonce=nonce.value,
        message=challenge_message(nonce.value, payload.player_address),
        expires_in=services.nonces.ttl_ms,
    )


@router.post(
    "/get-session-token",
    summary="Exchange a signed challenge for a session token",
    response_model=SessionTokenResponse,
    responses={401: {"model": ErrorResponse}},
)
def get_session_token(
    payload: SessionTokenRequest,
    services: ServicesDep,
) -> SessionTokenResponse:
    """Verify the wallet signature, burn the nonce and issue a token."""
    if not is_valid_address(payload.player_address):
        raise InvalidRequestError("Invalid player address format")

    message = challenge_message(payload.nonce, payload.player_address)
    if not verify_signature(payload.player_address, message, payload.signature):
        logger.warning("Signature check failed for %s", payload.player_address)
        raise InvalidTokenError("Invalid signature or expired/used nonce")
    if not services.nonces.consume(payload.nonce):
        logger.warning("Stale or reused nonce presented by %s", payload.player_address)
        raise InvalidTokenError("Invalid signature or expired/used nonce")

    issued = services.tokens.issue(payload.player_address)
    return SessionTokenResponse(session_token=issued.token, expires_at=issued.expires_at)
