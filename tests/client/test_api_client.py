"""Tests for the HTTP client's request and error handling."""

import json

import httpx
import pytest

from score_gate.client import ApiError, ScoreApiClient


def _client(handler) -> ScoreApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://gate")
    return ScoreApiClient(origin="http://localhost:3000", client=http)


@pytest.mark.asyncio
async def test_sends_camel_case_body_and_origin() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "gameSessionId": "game_1_abc"})

    api = _client(handler)
    session_id = await api.start_game_session("0xabc", "token")

    assert session_id == "game_1_abc"
    assert seen[0].url.path == "/api/game-session/start"
    assert seen[0].headers["origin"] == "http://localhost:3000"
    assert json.loads(seen[0].content) == {"playerAddress": "0xabc", "sessionToken": "token"}


@pytest.mark.asyncio
async def test_error_payload_becomes_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={"success": False, "error": "Too many action requests", "resetTime": 123},
        )

    with pytest.raises(ApiError) as exc_info:
        await _client(handler).submit_game_action("0xabc", "game_1", "token", "shot_fired")

    assert exc_info.value.status_code == 429
    assert exc_info.value.error == "Too many action requests"
    assert exc_info.value.payload["resetTime"] == 123
    assert exc_info.value.suspicious is False


@pytest.mark.asyncio
async def test_non_json_error_uses_reason_phrase() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="upstream down")

    with pytest.raises(ApiError) as exc_info:
        await _client(handler).get_nonce("0xabc")

    assert exc_info.value.status_code == 502
    assert exc_info.value.error == "Bad Gateway"


@pytest.mark.asyncio
async def test_owned_client_is_closed() -> None:
    api = ScoreApiClient("http://gate")

    await api.aclose()

    assert api._client.is_closed
