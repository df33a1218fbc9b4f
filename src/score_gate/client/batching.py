"""Debounced submission of ended game sessions."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from score_gate.client.orchestrator import StepResult

logger = logging.getLogger(__name__)

SUBMIT_DELAY_SECONDS = 5.0


class ScoreSubmissionScheduler:
    """Queue ended sessions and commit them after a quiet period.

    Each ``schedule`` restarts the timer, so a burst of short games results in
    one submission round once play pauses for ``delay_seconds``.
    """

    def __init__(
        self,
        submit: Callable[[str], Awaitable[StepResult]],
        *,
        delay_seconds: float = SUBMIT_DELAY_SECONDS,
    ) -> None:
        self._submit = submit
        self.delay_seconds = delay_seconds
        self._pending: list[str] = []
        self._timer: asyncio.Task[list[StepResult]] | None = None

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    def schedule(self, game_session_id: str) -> None:
        if game_session_id not in self._pending:
            self._pending.append(game_session_id)
        self._cancel_timer()
        self._timer = asyncio.create_task(self._fire())

    async def flush(self) -> list[StepResult]:
        """Submit everything pending now, skipping the remaining delay."""
        self._cancel_timer()
        return await self._drain()

    async def close(self) -> None:
        timer = self._timer
        self._cancel_timer()
        if timer is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await timer

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _fire(self) -> list[StepResult]:
        await asyncio.sleep(self.delay_seconds)
        # Detach before draining so a later flush cannot cancel a submission.
        self._timer = None
        return await self._drain()

    async def _drain(self) -> list[StepResult]:
        pending, self._pending = self._pending, []
        results: list[StepResult] = []
        for game_session_id in pending:
            result = await self._submit(game_session_id)
            if result.success:
                logger.info("Submitted session %s: %s", game_session_id, result.transaction_hash)
            else:
                logger.warning("Submission of session %s failed: %s", game_session_id, result.error)
            results.append(result)
        return results
