"""Server-side game session tracking and anti-cheat validation.

Each session moves Active -> Ended exactly once. Actions are validated
against per-second rate caps, a minimum spacing between actions, a maximum
session age and a score ceiling before they touch the score. Every mutation
of a session happens under that session's key lock.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any

from score_gate.core.errors import (
    ActionRateExceededError,
    ActionTooFrequentError,
    GateError,
    InvalidActionError,
    ScoreOutOfBoundsError,
    SessionExpiredError,
    SessionInactiveError,
    SessionMismatchError,
    SessionNotFoundError,
)
from score_gate.core.security import addresses_match
from score_gate.models import ActionType, GameAction, GameSession
from score_gate.services.store import InMemoryStore, KeyValueStore
from score_gate.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)

RECENT_ACTION_SPAN_MS = 1000
CLIENT_ACTION_TYPES = frozenset(
    {ActionType.SHOT_FIRED, ActionType.ENEMY_KILLED, ActionType.GAME_ENDED}
)


@dataclass(frozen=True)
class GameLimits:
    """Anti-cheat thresholds applied to every session."""

    max_shots_per_second: int = 10
    max_kills_per_second: int = 5
    min_time_between_actions_ms: int = 50
    max_session_duration_ms: int = 30 * 60 * 1000
    points_per_kill: int = 10
    max_score_per_session: int = 10_000


@dataclass(frozen=True)
class ActionResult:
    valid: bool
    error: GateError | None = None
    session: GameSession | None = None


@dataclass(frozen=True)
class EndResult:
    valid: bool
    final_score: int | None = None
    error: GateError | None = None


@dataclass(frozen=True)
class SessionStats:
    score: int
    enemies_killed: int
    shots_fired: int
    accuracy: float
    duration_ms: int


def _reject(error: GateError) -> ActionResult:
    error.suspicious = True
    return ActionResult(valid=False, error=error)


class GameSessionStore:
    """Owns every game session and the rules for mutating them."""

    def __init__(
        self,
        store: KeyValueStore[GameSession] | None = None,
        *,
        limits: GameLimits | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._clock = clock
        self._store: KeyValueStore[GameSession] = store or InMemoryStore(clock=clock)
        self.limits = limits or GameLimits()

    def _save(self, session: GameSession) -> None:
        idle_budget = session.last_action_time + self.limits.max_session_duration_ms - self._clock()
        self._store.set(session.session_id, session, ttl_ms=max(1, idle_budget))

    def create(self, player_address: str) -> str:
        """Open a new active session for ``player_address`` and return its id."""
        now = self._clock()
        session_id = f"game_{now}_{secrets.token_hex(5)}"
        session = GameSession(
            player_address=player_address,
            session_id=session_id,
            start_time=now,
            last_action_time=now,
            actions=[GameAction(type=ActionType.GAME_STARTED, timestamp=now)],
        )
        with self._store.lock(session_id):
            self._save(session)
        logger.info("Started game session %s for %s", session_id, player_address)
        return session_id

    def get(self, session_id: str) -> GameSession | None:
        return self._store.get(session_id)

    def validate_action(
        self,
        session_id: str,
        player_address: str,
        action_type: ActionType | str,
        data: dict[str, Any] | None = None,
    ) -> ActionResult:
        """Validate one client action and, if accepted, apply it to the session.

        Args:
            session_id: Target game session.
            player_address: Address claiming ownership of the session.
            action_type: One of ``shot_fired``, ``enemy_killed``, ``game_ended``.
            data: Optional opaque payload stored with the action.

        Returns:
            ActionResult carrying the updated session on acceptance, or a
            suspicious ``GateError`` on rejection. Rejections never mutate
            the session, except that detecting expiry ends it.
        """
        try:
            kind = ActionType(action_type)
        except ValueError:
            return _reject(InvalidActionError(f"Unsupported action type: {action_type}"))
        if kind not in CLIENT_ACTION_TYPES:
            return _reject(InvalidActionError(f"Action type {kind.value} is reserved"))

        with self._store.lock(session_id):
            session = self._store.get(session_id)
            if session is None:
                return _reject(SessionNotFoundError())
            if not addresses_match(session.player_address, player_address):
                return _reject(SessionMismatchError())
            if not session.is_active:
                return _reject(SessionInactiveError())

            now = self._clock()
            if now - session.start_time > self.limits.max_session_duration_ms:
                self._save(session.model_copy(update={"is_active": False}))
                logger.info("Game session %s expired", session_id)
                return _reject(SessionExpiredError())

            if now - session.last_action_time < self.limits.min_time_between_actions_ms:
                return _reject(ActionTooFrequentError())

            updates: dict[str, Any] = {}
            if kind is ActionType.SHOT_FIRED:
                recent = session.recent_count(kind, now, RECENT_ACTION_SPAN_MS)
                if recent >= self.limits.max_shots_per_second:
                    return _reject(ActionRateExceededError("Too many shots fired per second"))
                updates["shots_fired"] = session.shots_fired + 1
            elif kind is ActionType.ENEMY_KILLED:
                recent = session.recent_count(kind, now, RECENT_ACTION_SPAN_MS)
                if recent >= self.limits.max_kills_per_second:
                    return _reject(ActionRateExceededError("Too many kills per second"))
                score = session.score + self.limits.points_per_kill
                # Over-cap kills are rejected whole: neither counter moves.
                if score > self.limits.max_score_per_session:
                    return _reject(ScoreOutOfBoundsError())
                updates["enemies_killed"] = session.enemies_killed + 1
                updates["score"] = score
            else:
                updates["is_active"] = False

            updates["actions"] = [*session.actions, GameAction(type=kind, timestamp=now, data=data)]
            updates["last_action_time"] = now
            updated = session.model_copy(update=updates)
            self._save(updated)

        return ActionResult(valid=True, session=updated)

    def end(self, session_id: str, player_address: str) -> EndResult:
        """End an active session owned by ``player_address``.

        Concurrent calls on the same session serialize on its lock; exactly
        one succeeds and the rest observe ``SessionInactiveError``.
        """
        with self._store.lock(session_id):
            session = self._store.get(session_id)
            if session is None:
                return EndResult(valid=False, error=SessionNotFoundError())
            if not addresses_match(session.player_address, player_address):
                return EndResult(valid=False, error=SessionMismatchError())
            if not session.is_active:
                return EndResult(valid=False, error=SessionInactiveError())

            now = self._clock()
            updated = session.model_copy(
                update={
                    "is_active": False,
                    "actions": [*session.actions, GameAction(type=ActionType.GAME_ENDED, timestamp=now)],
                    "last_action_time": max(now, session.last_action_time),
                }
            )
            self._save(updated)

        logger.info("Ended game session %s with score %d", session_id, updated.score)
        return EndResult(valid=True, final_score=updated.score)

    def stats(self, session_id: str) -> SessionStats | None:
        """Summarize a session; duration stops counting once it has ended."""
        session = self._store.get(session_id)
        if session is None:
            return None
        accuracy = 0.0
        if session.shots_fired > 0:
            accuracy = round(session.enemies_killed / session.shots_fired * 100, 2)
        end_time = self._clock() if session.is_active else session.last_action_time
        return SessionStats(
            score=session.score,
            enemies_killed=session.enemies_killed,
            shots_fired=session.shots_fired,
            accuracy=accuracy,
            duration_ms=end_time - session.start_time,
        )

    def sweep(self) -> int:
        """Remove sessions idle for longer than the maximum session duration."""
        now = self._clock()
        limit = self.limits.max_session_duration_ms
        removed = self._store.sweep(lambda session: now - session.last_action_time > limit)
        if removed:
            logger.debug("Removed %d idle game sessions", removed)
        return removed
