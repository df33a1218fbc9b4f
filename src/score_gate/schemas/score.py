"""Score commit schemas."""

from pydantic import Field

from .common import AuthenticatedRequest, CamelModel


class CommitScoreRequest(AuthenticatedRequest):
    """Request to write an ended session's server-computed score on chain."""

    game_session_id: str = Field(..., min_length=1)


class CommitScoreResponse(CamelModel):
    success: bool = True
    transaction_hash: str
    message: str = "Player data updated successfully"
