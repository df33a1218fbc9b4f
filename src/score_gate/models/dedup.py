"""Idempotency record for outbound score writes."""

from enum import Enum

from pydantic import BaseModel


class DedupState(str, Enum):
    PROCESSING = "processing"
    COMPLETE = "complete"


class DedupRecord(BaseModel):
    """Tracks one fingerprinted write request until its TTL lapses."""

    request_id: str
    state: DedupState
    timestamp: int
    transaction_hash: str | None = None
