"""Client-side sequencing of the wallet-authenticated game protocol.

The orchestrator walks: nonce -> signature -> session token -> start game ->
actions -> end game -> commit score. Every step reports a ``StepResult``
instead of raising, so a game loop can keep running on failure.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from score_gate.client.api import ApiError, ScoreApiClient
from score_gate.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)

MessageSigner = Callable[[str], "Awaitable[str] | str"]


@dataclass
class AuthSession:
    """Local view of the authenticated player; never persisted."""

    player_address: str
    session_token: str
    expires_at: int
    game_session_id: str | None = None
    last_ended_session_id: str | None = None


@dataclass(frozen=True)
class StepResult:
    success: bool
    error: str | None = None
    suspicious: bool = False
    game_session_id: str | None = None
    current_score: int | None = None
    final_score: int | None = None
    stats: dict[str, Any] = field(default_factory=dict)
    transaction_hash: str | None = None


@dataclass(frozen=True)
class SessionStatus:
    authenticated: bool
    game_active: bool
    player_address: str | None = None
    expires_at: int | None = None


def _failure(err: ApiError) -> StepResult:
    return StepResult(success=False, error=err.error, suspicious=err.suspicious)


class SessionOrchestrator:
    """Drives one player's session against the gate API."""

    def __init__(self, api: ScoreApiClient, *, clock: Clock = now_ms) -> None:
        self._api = api
        self._clock = clock
        self.session: AuthSession | None = None

    def _authenticated(self) -> bool:
        return self.session is not None and self._clock() <= self.session.expires_at

    async def authenticate_wallet(
        self, player_address: str, sign_message: MessageSigner
    ) -> StepResult:
        """Prove wallet ownership and store the resulting session token.

        Args:
            player_address: Wallet address to authenticate.
            sign_message: Callable (sync or async) returning a ``personal_sign``
                signature over the given text.
        """
        try:
            challenge = await self._api.get_nonce(player_address)
        except ApiError as err:
            return StepResult(success=False, error=f"Failed to get authentication nonce: {err.error}")
        except httpx.HTTPError as err:
            logger.error("Nonce request failed: %s", err)
            return StepResult(success=False, error="Failed to get authentication nonce")

        try:
            signature = sign_message(challenge.message)
            if inspect.isawaitable(signature):
                signature = await signature
        except Exception as err:
            logger.error("Wallet signing failed: %s", err)
            return StepResult(success=False, error="Authentication failed")

        try:
            grant = await self._api.get_session_token(player_address, str(signature), challenge.nonce)
        except ApiError as err:
            return StepResult(success=False, error=f"Failed to authenticate signature: {err.error}")
        except httpx.HTTPError as err:
            logger.error("Session token request failed: %s", err)
            return StepResult(success=False, error="Authentication failed")

        self.session = AuthSession(
            player_address=player_address,
            session_token=grant.session_token,
            expires_at=grant.expires_at,
        )
        return StepResult(success=True)

    async def start_game(self) -> StepResult:
        if self.session is None or not self._authenticated():
            return StepResult(success=False, error="Authentication expired. Please authenticate again.")
        try:
            game_session_id = await self._api.start_game_session(
                self.session.player_address, self.session.session_token
            )
        except ApiError as err:
            return _failure(err)
        except httpx.HTTPError as err:
            logger.error("Game start failed: %s", err)
            return StepResult(success=False, error="Failed to start game")

        self.session.game_session_id = game_session_id
        return StepResult(success=True, game_session_id=game_session_id)

    async def submit_action(
        self, action_type: str, action_data: dict[str, Any] | None = None
    ) -> StepResult:
        if self.session is None or self.session.game_session_id is None:
            return StepResult(success=False, error="No active game session")
        try:
            score = await self._api.submit_game_action(
                self.session.player_address,
                self.session.game_session_id,
                self.session.session_token,
                action_type,
                action_data,
            )
        except ApiError as err:
            return _failure(err)
        except httpx.HTTPError as err:
            logger.error("Action submission failed: %s", err)
            return StepResult(success=False, error="Failed to submit action")
        return StepResult(success=True, current_score=score)

    async def end_game(self) -> StepResult:
        if self.session is None or self.session.game_session_id is None:
            return StepResult(success=False, error="No active game session")
        game_session_id = self.session.game_session_id
        try:
            ended = await self._api.end_game_session(
                self.session.player_address, game_session_id, self.session.session_token
            )
        except ApiError as err:
            return _failure(err)
        except httpx.HTTPError as err:
            logger.error("Game end failed: %s", err)
            return StepResult(success=False, error="Failed to end game")

        self.session.game_session_id = None
        self.session.last_ended_session_id = game_session_id
        return StepResult(
            success=True,
            game_session_id=game_session_id,
            final_score=ended.final_score,
            stats=ended.stats,
        )

    async def submit_to_blockchain(self, game_session_id: str | None = None) -> StepResult:
        """Commit an ended session's score, by default the most recent one."""
        if self.session is None:
            return StepResult(success=False, error="No active session")
        if self.session.game_session_id is not None and game_session_id is None:
            return StepResult(success=False, error="Game session still active. End the game first.")
        target = game_session_id or self.session.last_ended_session_id
        if target is None:
            return StepResult(success=False, error="No ended game session to submit")
        try:
            tx_hash = await self._api.submit_game_session(
                self.session.player_address, target, self.session.session_token
            )
        except ApiError as err:
            return _failure(err)
        except httpx.HTTPError as err:
            logger.error("Score submission failed: %s", err)
            return StepResult(success=False, error="Failed to submit to blockchain")

        if target == self.session.last_ended_session_id:
            self.session.last_ended_session_id = None
        return StepResult(success=True, game_session_id=target, transaction_hash=tx_hash)

    def session_status(self) -> SessionStatus:
        if self.session is None:
            return SessionStatus(authenticated=False, game_active=False)
        authenticated = self._authenticated()
        return SessionStatus(
            authenticated=authenticated,
            game_active=authenticated and self.session.game_session_id is not None,
            player_address=self.session.player_address,
            expires_at=self.session.expires_at,
        )

    def logout(self) -> None:
        """Forget local state; server-side records expire on their own."""
        self.session = None
