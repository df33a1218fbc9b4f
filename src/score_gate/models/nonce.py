"""One-time authentication challenge record."""

from pydantic import BaseModel


class Nonce(BaseModel):
    """Random challenge value handed to a wallet before it signs in."""

    value: str
    issued_at: int
    used: bool = False
