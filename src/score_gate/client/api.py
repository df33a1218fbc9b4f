"""Async HTTP client for the score gate API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

HTTP_BAD_REQUEST = 400


class ApiError(RuntimeError):
    """Raised when the gate answers with a non-2xx status."""

    def __init__(self, status_code: int, error: str, payload: dict[str, Any] | None = None) -> None:
        super().__init__(f"{status_code}: {error}")
        self.status_code = status_code
        self.error = error
        self.payload = payload or {}

    @property
    def suspicious(self) -> bool:
        return bool(self.payload.get("suspicious"))


@dataclass(frozen=True)
class NonceChallenge:
    nonce: str
    message: str
    expires_in: int


@dataclass(frozen=True)
class TokenGrant:
    session_token: str
    expires_at: int


@dataclass(frozen=True)
class EndedGame:
    final_score: int
    stats: dict[str, Any] = field(default_factory=dict)


class ScoreApiClient:
    """Thin wrapper over the gate's JSON endpoints.

    Pass ``client`` to reuse a configured ``httpx.AsyncClient`` (for example
    one mounted on an ASGI transport in tests); otherwise one is created for
    ``base_url`` and closed by ``aclose``.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        origin: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
        )
        self._headers = {"Origin": origin} if origin else {}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(path, json=body, headers=self._headers)
        try:
            data: dict[str, Any] = response.json()
        except ValueError:
            data = {}
        if response.status_code >= HTTP_BAD_REQUEST:
            raise ApiError(response.status_code, str(data.get("error", response.reason_phrase)), data)
        return data

    async def get_nonce(self, player_address: str) -> NonceChallenge:
        data = await self._post("/api/get-nonce", {"playerAddress": player_address})
        return NonceChallenge(
            nonce=data["nonce"],
            message=data["message"],
            expires_in=int(data["expiresIn"]),
        )

    async def get_session_token(self, player_address: str, signature: str, nonce: str) -> TokenGrant:
        data = await self._post(
            "/api/get-session-token",
            {"playerAddress": player_address, "signature": signature, "nonce": nonce},
        )
        return TokenGrant(session_token=data["sessionToken"], expires_at=int(data["expiresAt"]))

    async def start_game_session(self, player_address: str, session_token: str) -> str:
        data = await self._post(
            "/api/game-session/start",
            {"playerAddress": player_address, "sessionToken": session_token},
        )
        return str(data["gameSessionId"])

    async def submit_game_action(
        self,
        player_address: str,
        game_session_id: str,
        session_token: str,
        action_type: str,
        action_data: dict[str, Any] | None = None,
    ) -> int:
        """Submit one action and return the server's current score."""
        action: dict[str, Any] = {"type": action_type}
        if action_data is not None:
            action["data"] = action_data
        data = await self._post(
            "/api/game-session/action",
            {
                "playerAddress": player_address,
                "sessionToken": session_token,
                "gameSessionId": game_session_id,
                "action": action,
            },
        )
        return int(data.get("currentScore", 0))

    async def end_game_session(
        self, player_address: str, game_session_id: str, session_token: str
    ) -> EndedGame:
        data = await self._post(
            "/api/game-session/end",
            {
                "playerAddress": player_address,
                "sessionToken": session_token,
                "gameSessionId": game_session_id,
            },
        )
        return EndedGame(final_score=int(data["finalScore"]), stats=data.get("stats") or {})

    async def submit_game_session(
        self, player_address: str, game_session_id: str, session_token: str
    ) -> str:
        """Commit an ended session's score and return the transaction hash."""
        data = await self._post(
            "/api/update-player-data",
            {
                "playerAddress": player_address,
                "sessionToken": session_token,
                "gameSessionId": game_session_id,
            },
        )
        return str(data["transactionHash"])
