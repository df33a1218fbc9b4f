"""Background reclamation of expired nonces, sessions and counters.

The worker only performs maintenance; no request depends on when it runs,
because every store also checks ages on access.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

Sweep = Callable[[], int]


class MaintenanceWorker:
    """Periodically runs each registered sweep until stopped."""

    def __init__(self, sweeps: Mapping[str, Sweep], interval_seconds: float = 300.0) -> None:
        """Initialize the maintenance worker.

        Args:
            sweeps: Sweep callables keyed by a name used in log lines.
            interval_seconds: Delay between sweep passes.
        """
        self.sweeps = dict(sweeps)
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the loop and wait for the current pass to finish."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    def run_once(self) -> dict[str, int]:
        """Run every sweep once and return the number of entries each removed."""
        results: dict[str, int] = {}
        for name, sweep in self.sweeps.items():
            try:
                results[name] = sweep()
            except Exception as e:
                logger.error("Sweep %s failed: %s", name, e, exc_info=True)
                results[name] = 0
        logger.debug("Maintenance pass complete: %s", results)
        return results

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                await asyncio.to_thread(self.run_once)
