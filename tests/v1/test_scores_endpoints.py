# tests/v1/test_scores_endpoints.py
"""Tests for committing session scores on chain."""

from __future__ import annotations

from fastapi import status

from tests.conftest import TX_HASH, auth_body, login


def _played_session(client, account, clock, kills: int = 2, end: bool = True) -> tuple[str, str]:
    token = login(client, account)
    started = client.post("/api/game-session/start", json=auth_body(account, token))
    session_id = started.json()["gameSessionId"]
    for _ in range(kills):
        clock.advance(100)
        client.post(
            "/api/game-session/action",
            json=auth_body(account, token, gameSessionId=session_id, action={"type": "enemy_killed"}),
        )
    if end:
        client.post("/api/game-session/end", json=auth_body(account, token, gameSessionId=session_id))
    return token, session_id


def _commit(client, account, token, session_id, **extra):
    return client.post(
        "/api/update-player-data",
        json=auth_body(account, token, gameSessionId=session_id, **extra),
    )


def test_commit_writes_server_score(client, account, clock, score_writer) -> None:
    token, session_id = _played_session(client, account, clock)

    response = _commit(client, account, token, session_id, score=99_999)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["transactionHash"] == TX_HASH
    assert score_writer.calls == [(account.address, 20, 1)]


def test_commit_requires_ended_session(client, account, clock, score_writer) -> None:
    token, session_id = _played_session(client, account, clock, end=False)

    response = _commit(client, account, token, session_id)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "session_still_active"
    assert score_writer.calls == []


def test_commit_of_unknown_session(client, account) -> None:
    token = login(client, account)

    response = _commit(client, account, token, "game_0_missing")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "session_not_found"


def test_commit_of_foreign_session_is_forbidden(client, account, other_account, clock) -> None:
    _, session_id = _played_session(client, account, clock)
    intruder_token = login(client, other_account)

    response = _commit(client, other_account, intruder_token, session_id)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "session_mismatch"


def test_duplicate_commit_is_rejected(client, account, clock, score_writer) -> None:
    token, session_id = _played_session(client, account, clock)

    first = _commit(client, account, token, session_id)
    second = _commit(client, account, token, session_id)

    assert first.status_code == status.HTTP_200_OK
    assert second.status_code == status.HTTP_409_CONFLICT
    assert second.json()["code"] == "duplicate_request"
    assert len(score_writer.calls) == 1


def test_definitive_failure_allows_retry(client, account, clock, score_writer) -> None:
    token, session_id = _played_session(client, account, clock)
    score_writer.error = RuntimeError("insufficient funds for gas * price + value")

    failed = _commit(client, account, token, session_id)
    score_writer.error = None
    retried = _commit(client, account, token, session_id)

    assert failed.status_code == status.HTTP_400_BAD_REQUEST
    assert failed.json()["code"] == "upstream_write_failure"
    assert failed.json()["cause"] == "insufficient_funds"
    assert retried.status_code == status.HTTP_200_OK


def test_role_failure_maps_to_forbidden(client, account, clock, score_writer) -> None:
    token, session_id = _played_session(client, account, clock)
    score_writer.error = RuntimeError("execution reverted: AccessControlUnauthorizedAccount")

    response = _commit(client, account, token, session_id)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["cause"] == "unauthorized_role"


def test_unknown_failure_keeps_request_claimed(client, account, clock, score_writer) -> None:
    token, session_id = _played_session(client, account, clock)
    score_writer.error = RuntimeError("read timeout")

    failed = _commit(client, account, token, session_id)
    score_writer.error = None
    retried = _commit(client, account, token, session_id)

    assert failed.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert retried.status_code == status.HTTP_409_CONFLICT


def test_missing_writer_config_is_server_error(client, account, clock, services) -> None:
    token, session_id = _played_session(client, account, clock)
    services.score_writer = None

    response = _commit(client, account, token, session_id)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["code"] == "server_misconfigured"


def test_commit_requires_token(client, account, clock) -> None:
    _, session_id = _played_session(client, account, clock)

    response = _commit(client, account, "f" * 64, session_id)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
