"""Wallet authentication schemas."""

from pydantic import Field

from .common import CamelModel


class NonceRequest(CamelModel):
    """Request for a fresh sign-in challenge."""

    player_address: str = Field(..., min_length=1, description="Wallet address to authenticate")


class NonceResponse(CamelModel):
    """Challenge the wallet must sign."""

    success: bool = True
    nonce: str = Field(..., description="Single-use hex nonce")
    message: str = Field(..., description="Exact text the wallet must sign")
    expires_in: int = Field(..., description="Milliseconds until the nonce expires")


class SessionTokenRequest(CamelModel):
    """Signed challenge exchanged for a session token."""

    player_address: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1, description="Hex personal_sign signature")
    nonce: str = Field(..., min_length=1)


class SessionTokenResponse(CamelModel):
    success: bool = True
    session_token: str
    expires_at: int = Field(..., description="Epoch milliseconds when the token lapses")
