import asyncio
import logging

import pytest

from score_gate.services.maintenance import MaintenanceWorker


def test_run_once_reports_each_sweep() -> None:
    worker = MaintenanceWorker({"nonces": lambda: 2, "dedup": lambda: 0})

    assert worker.run_once() == {"nonces": 2, "dedup": 0}


def test_failing_sweep_does_not_stop_others(caplog) -> None:
    def broken() -> int:
        raise RuntimeError("store offline")

    worker = MaintenanceWorker({"broken": broken, "nonces": lambda: 1})

    with caplog.at_level(logging.ERROR):
        results = worker.run_once()

    assert results == {"broken": 0, "nonces": 1}
    assert "Sweep broken failed" in caplog.text


@pytest.mark.asyncio
async def test_worker_runs_until_stopped() -> None:
    calls: list[int] = []

    def sweep() -> int:
        calls.append(1)
        return 0

    worker = MaintenanceWorker({"tick": sweep}, interval_seconds=0.01)
    await worker.start()
    assert worker.running

    await asyncio.sleep(0.1)
    await worker.stop()

    assert not worker.running
    assert calls
    seen = len(calls)
    await asyncio.sleep(0.05)
    assert len(calls) == seen


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    worker = MaintenanceWorker({})

    await worker.stop()

    assert not worker.running
