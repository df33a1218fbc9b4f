"""Error taxonomy for the score gate.

Validation failures are never raised out of the stores; they are returned as
``GateError`` instances on result objects. The API layer raises them and a
single exception handler renders the JSON body.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error identifiers returned to clients."""

    INVALID_ORIGIN = "invalid_origin"
    RATE_LIMITED = "rate_limited"
    INVALID_TOKEN = "invalid_token"
    INVALID_REQUEST = "invalid_request"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_MISMATCH = "session_mismatch"
    SESSION_INACTIVE = "session_inactive"
    SESSION_EXPIRED = "session_expired"
    SESSION_STILL_ACTIVE = "session_still_active"
    ACTION_TOO_FREQUENT = "action_too_frequent"
    ACTION_RATE_EXCEEDED = "action_rate_exceeded"
    SCORE_OUT_OF_BOUNDS = "score_out_of_bounds"
    INVALID_ACTION = "invalid_action"
    DUPLICATE_REQUEST = "duplicate_request"
    UPSTREAM_WRITE_FAILURE = "upstream_write_failure"
    SERVER_MISCONFIGURED = "server_misconfigured"
    STORE_BUSY = "store_busy"


class GateError(RuntimeError):
    """Base exception for every structured failure in the gate.

    Subclasses pin ``code`` and ``status_code``; ``suspicious`` marks
    anti-cheat rejections so the transport layer can log or alert on them.
    """

    code: ErrorCode = ErrorCode.INVALID_REQUEST
    status_code: int = 400
    default_message = "Request rejected"

    def __init__(
        self,
        message: str | None = None,
        *,
        suspicious: bool = False,
        status_code: int | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.suspicious = suspicious
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body describing this error."""
        payload: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code.value,
        }
        if self.suspicious:
            payload["suspicious"] = True
        return payload


class InvalidOriginError(GateError):
    code = ErrorCode.INVALID_ORIGIN
    status_code = 403
    default_message = "Forbidden: Invalid origin"


class RateLimitedError(GateError):
    """Raised when a client exceeds an endpoint's request ceiling."""

    code = ErrorCode.RATE_LIMITED
    status_code = 429
    default_message = "Too many requests"

    def __init__(self, reset_time: int, message: str | None = None) -> None:
        super().__init__(message)
        self.reset_time = reset_time

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["resetTime"] = self.reset_time
        return payload


class InvalidTokenError(GateError):
    code = ErrorCode.INVALID_TOKEN
    status_code = 401
    default_message = "Unauthorized: Invalid or expired session token"


class InvalidRequestError(GateError):
    code = ErrorCode.INVALID_REQUEST
    status_code = 400
    default_message = "Invalid request"


class SessionNotFoundError(GateError):
    code = ErrorCode.SESSION_NOT_FOUND
    status_code = 400
    default_message = "Invalid session ID"


class SessionMismatchError(GateError):
    code = ErrorCode.SESSION_MISMATCH
    status_code = 400
    default_message = "Session belongs to different player"


class SessionInactiveError(GateError):
    code = ErrorCode.SESSION_INACTIVE
    status_code = 400
    default_message = "Game session is not active"


class SessionExpiredError(GateError):
    code = ErrorCode.SESSION_EXPIRED
    status_code = 400
    default_message = "Game session expired"


class SessionStillActiveError(GateError):
    code = ErrorCode.SESSION_STILL_ACTIVE
    status_code = 400
    default_message = "Game session is still active. End the session first."


class ActionTooFrequentError(GateError):
    code = ErrorCode.ACTION_TOO_FREQUENT
    status_code = 400
    default_message = "Actions too frequent"


class ActionRateExceededError(GateError):
    code = ErrorCode.ACTION_RATE_EXCEEDED
    status_code = 400
    default_message = "Too many actions per second"


class ScoreOutOfBoundsError(GateError):
    code = ErrorCode.SCORE_OUT_OF_BOUNDS
    status_code = 400
    default_message = "Score too high for session duration"


class InvalidActionError(GateError):
    code = ErrorCode.INVALID_ACTION
    status_code = 400
    default_message = "Unsupported action type"


class DuplicateRequestError(GateError):
    code = ErrorCode.DUPLICATE_REQUEST
    status_code = 409
    default_message = "Duplicate request detected. Please wait before retrying."


class UpstreamWriteFailureError(GateError):
    """Raised when the blockchain write collaborator rejects a submission.

    ``cause`` is one of ``insufficient_funds``, ``execution_reverted``,
    ``unauthorized_role`` or ``unknown``. Only ``unknown`` leaves the outcome
    of the write undetermined.
    """

    code = ErrorCode.UPSTREAM_WRITE_FAILURE
    default_message = "Failed to update player data"

    _STATUS_BY_CAUSE = {
        "insufficient_funds": 400,
        "execution_reverted": 400,
        "unauthorized_role": 403,
        "unknown": 500,
    }

    def __init__(self, cause: str, message: str | None = None) -> None:
        super().__init__(message)
        self.cause = cause if cause in self._STATUS_BY_CAUSE else "unknown"
        self.status_code = self._STATUS_BY_CAUSE[self.cause]

    @property
    def definitive(self) -> bool:
        """Return True when the write is known not to have been applied."""
        return self.cause != "unknown"

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["cause"] = self.cause
        return payload


class ServerMisconfiguredError(GateError):
    code = ErrorCode.SERVER_MISCONFIGURED
    status_code = 500
    default_message = "Server configuration error"


class StoreBusyError(GateError):
    """Raised when a record's lock cannot be acquired in time."""

    code = ErrorCode.STORE_BUSY
    status_code = 503
    default_message = "Service busy, please retry"
