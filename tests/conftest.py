# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("SESSION_SECRET", "test-session-secret")

from score_gate.core.settings import Settings
from score_gate.main import create_app
from score_gate.services.container import GateServices, build_services
from score_gate.services.store import memory_store_factory

ORIGIN = "http://localhost:3000"
# Aligned to a 30 s token bucket so window arithmetic in tests stays exact.
START_MS = 1_699_999_980_000
TX_HASH = "0x" + "ab" * 32


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class FakeScoreWriter:
    """Records score writes; raises ``error`` when one is set."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int, int]] = []
        self.error: Exception | None = None
        self.tx_hash = TX_HASH

    def update_player_data(
        self, player_address: str, score_amount: int, transaction_amount: int
    ) -> str:
        self.calls.append((player_address, score_amount, transaction_amount))
        if self.error is not None:
            raise self.error
        return self.tx_hash


def sign_text(account: LocalAccount, text: str) -> str:
    """Return a hex ``personal_sign`` signature of ``text``."""
    signed = Account.sign_message(encode_defunct(text=text), private_key=account.key)
    return "0x" + bytes(signed.signature).hex()


def login(client: TestClient, account: LocalAccount) -> str:
    """Run the nonce/signature exchange and return a session token."""
    challenge = client.post("/api/get-nonce", json={"playerAddress": account.address})
    assert challenge.status_code == 200
    body = challenge.json()
    response = client.post(
        "/api/get-session-token",
        json={
            "playerAddress": account.address,
            "signature": sign_text(account, body["message"]),
            "nonce": body["nonce"],
        },
    )
    assert response.status_code == 200
    return response.json()["sessionToken"]


def auth_body(account: LocalAccount, token: str, **extra: Any) -> dict[str, Any]:
    return {"playerAddress": account.address, "sessionToken": token, **extra}


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        SESSION_SECRET="test-session-secret",
        RPC_URL=None,
        CONTRACT_ADDRESS=None,
        WALLET_PRIVATE_KEY=None,
    )


@pytest.fixture()
def score_writer() -> FakeScoreWriter:
    return FakeScoreWriter()


@pytest.fixture()
def services(
    test_settings: Settings,
    clock: FakeClock,
    score_writer: FakeScoreWriter,
) -> GateServices:
    return build_services(
        test_settings,
        clock=clock,
        store_factory=memory_store_factory(clock),
        score_writer=score_writer,
    )


@pytest.fixture()
def app(test_settings: Settings, services: GateServices) -> FastAPI:
    return create_app(test_settings, services)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test", headers={"Origin": ORIGIN}) as test_client:
        yield test_client


@pytest.fixture()
def account() -> LocalAccount:
    """Return a fresh player wallet."""
    return Account.create()


@pytest.fixture()
def other_account() -> LocalAccount:
    return Account.create()
