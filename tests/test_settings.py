# tests/test_settings.py
"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from score_gate.core.settings import Settings


def test_secret_is_required(monkeypatch) -> None:
    monkeypatch.delenv("SESSION_SECRET", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)  # type: ignore[call-arg]


def test_blank_secret_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, SESSION_SECRET="   ")  # type: ignore[call-arg]


def test_defaults_and_overrides(monkeypatch) -> None:
    monkeypatch.setenv("SESSION_SECRET", "s3cret")
    monkeypatch.setenv("APP_URL", "https://game.example/")
    monkeypatch.setenv("RATE_LIMIT_ACTION", "250")

    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.nonce_ttl_ms == 300_000
    assert settings.max_shots_per_second == 10
    assert settings.rate_limits == {"start": 5, "action": 250, "end": 10, "commit": 10}
    assert settings.allowed_origins[-1] == "https://game.example"
    assert "http://localhost:3000" in settings.allowed_origins
