"""Tests for the payout request deduplicator."""

from concurrent.futures import ThreadPoolExecutor

from score_gate.models import DedupState
from score_gate.services.dedup import RequestDeduplicator

PLAYER = "0x52908400098527886E0F7030069857D2E4169EE7"


def test_generate_id_is_deterministic_and_case_insensitive() -> None:
    base = RequestDeduplicator.generate_id(PLAYER, 10, "game_1_a")

    assert base == RequestDeduplicator.generate_id(PLAYER.lower(), 10, "game_1_a")
    assert base != RequestDeduplicator.generate_id(PLAYER, 20, "game_1_a")
    assert base != RequestDeduplicator.generate_id(PLAYER, 10, "game_1_b")
    assert len(base) == 64


def test_claim_rejects_second_caller(clock) -> None:
    dedup = RequestDeduplicator(clock=clock)

    assert dedup.claim("req") is True
    assert dedup.is_duplicate("req") is True
    assert dedup.get("req").state is DedupState.PROCESSING
    assert dedup.claim("req") is False


def test_concurrent_claims_have_single_winner(clock) -> None:
    dedup = RequestDeduplicator(clock=clock)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: dedup.claim("req"), range(32)))

    assert results.count(True) == 1


def test_mark_complete_records_transaction(clock) -> None:
    dedup = RequestDeduplicator(clock=clock)
    dedup.mark_processing("req")

    dedup.mark_complete("req", "0xabc")
    record = dedup.get("req")

    assert record.state is DedupState.COMPLETE
    assert record.transaction_hash == "0xabc"
    assert dedup.claim("req") is False


def test_release_only_forgets_processing(clock) -> None:
    dedup = RequestDeduplicator(clock=clock)
    dedup.claim("pending")
    dedup.claim("done")
    dedup.mark_complete("done", "0x1")

    dedup.release("pending")
    dedup.release("done")

    assert dedup.is_duplicate("pending") is False
    assert dedup.is_duplicate("done") is True


def test_records_expire_after_ttl(clock) -> None:
    dedup = RequestDeduplicator(ttl_ms=1000, clock=clock)
    dedup.claim("req")

    clock.advance(999)
    assert dedup.is_duplicate("req") is True

    clock.advance(1)
    assert dedup.is_duplicate("req") is False
    assert dedup.claim("req") is True


def test_sweep_removes_expired_records(clock) -> None:
    dedup = RequestDeduplicator(ttl_ms=1000, clock=clock)
    dedup.claim("old")
    clock.advance(600)
    dedup.claim("new")
    clock.advance(500)

    assert dedup.sweep() == 1
    assert dedup.is_duplicate("new") is True
