"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON with the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthenticatedRequest(CamelModel):
    """Fields every session-token protected request carries."""

    player_address: str = Field(..., description="Wallet address of the player")
    session_token: str = Field(..., description="Token returned by the signature exchange")


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    code: str
    suspicious: bool | None = None
    reset_time: int | None = None
