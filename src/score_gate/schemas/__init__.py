"""
Pydantic schemas for API request/response models.

These schemas define the camelCase wire format shared with the web client.
"""

from .auth import NonceRequest, NonceResponse, SessionTokenRequest, SessionTokenResponse
from .game import (
    ActionPayload,
    ActionRequest,
    ActionResponse,
    EndSessionRequest,
    EndSessionResponse,
    SessionStatsOut,
    StartSessionRequest,
    StartSessionResponse,
)
from .score import CommitScoreRequest, CommitScoreResponse

__all__ = [
    "ActionPayload", "ActionRequest", "ActionResponse",
    "CommitScoreRequest", "CommitScoreResponse",
    "EndSessionRequest", "EndSessionResponse", "SessionStatsOut",
    "NonceRequest", "NonceResponse",
    "SessionTokenRequest", "SessionTokenResponse",
    "StartSessionRequest", "StartSessionResponse",
]
