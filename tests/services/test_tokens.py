"""Tests for bucketed session tokens."""

import pytest

from score_gate.services.tokens import SessionTokenCodec

ADDRESS = "0x52908400098527886E0F7030069857D2E4169EE7"
OTHER = "0x8617E340B3D01FA5F11F306F4090FD50E238070D"


@pytest.fixture
def codec(clock) -> SessionTokenCodec:
    return SessionTokenCodec("unit-test-secret", clock=clock)


def test_issued_token_validates(codec: SessionTokenCodec, clock) -> None:
    issued = codec.issue(ADDRESS)

    assert codec.validate(issued.token, ADDRESS) is True
    assert issued.expires_at == codec.bucket_start(clock()) + codec.window_ms


def test_token_is_bound_to_address(codec: SessionTokenCodec) -> None:
    issued = codec.issue(ADDRESS)

    assert codec.validate(issued.token, OTHER) is False
    assert codec.validate(issued.token, ADDRESS.lower()) is True


def test_token_is_deterministic_within_bucket(codec: SessionTokenCodec, clock) -> None:
    first = codec.issue(ADDRESS)
    clock.advance(codec.bucket_ms - 1)
    assert codec.issue(ADDRESS).token == first.token

    clock.advance(1)
    assert codec.issue(ADDRESS).token != first.token


def test_token_valid_until_expiry(codec: SessionTokenCodec, clock) -> None:
    issued = codec.issue(ADDRESS)

    clock.now = issued.expires_at
    assert codec.validate(issued.token, ADDRESS) is True

    clock.advance(1)
    assert codec.validate(issued.token, ADDRESS) is False


def test_validate_honours_window_override(codec: SessionTokenCodec, clock) -> None:
    issued = codec.issue(ADDRESS)
    clock.advance(codec.bucket_ms + 1000)

    assert codec.validate(issued.token, ADDRESS) is True
    assert codec.validate(issued.token, ADDRESS, window_ms=codec.bucket_ms) is False


def test_rejects_tampered_and_foreign_tokens(codec: SessionTokenCodec, clock) -> None:
    issued = codec.issue(ADDRESS)
    tampered = ("0" if issued.token[0] != "0" else "1") + issued.token[1:]
    foreign = SessionTokenCodec("another-secret", clock=clock).issue(ADDRESS)

    assert codec.validate(tampered, ADDRESS) is False
    assert codec.validate(foreign.token, ADDRESS) is False
    assert codec.validate("", ADDRESS) is False


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        SessionTokenCodec("")


def test_ten_minute_old_token_is_rejected(codec: SessionTokenCodec, clock) -> None:
    issued = codec.issue(ADDRESS)
    clock.advance(10 * 60 * 1000)

    assert codec.validate(issued.token, ADDRESS) is False


@pytest.mark.parametrize(("token", "address"), [("tök", ADDRESS), ("ab" * 32, "0xädd")])
def test_non_ascii_input_is_rejected_without_error(codec: SessionTokenCodec, token, address) -> None:
    assert codec.validate(token, address) is False
