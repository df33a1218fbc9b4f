"""Fixed-window rate limit counter."""

from pydantic import BaseModel


class RateLimitEntry(BaseModel):
    client_key: str
    window_start: int
    window_ms: int
    count: int = 0
