"""Shared API dependencies: service lookup and the request guard chain.

Mutating endpoints run, in order: same-origin check, per-endpoint per-client
rate limit, session-token validation. The first two are route dependencies so
they fire before the body is parsed; the token check needs the body and is
called at the top of each endpoint.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request

from score_gate.core.errors import InvalidOriginError, InvalidTokenError, RateLimitedError
from score_gate.core.settings import Settings
from score_gate.schemas.common import AuthenticatedRequest
from score_gate.services.container import GateServices

_RATE_LIMIT_MESSAGES = {
    "start": "Too many session requests",
    "action": "Too many action requests",
    "end": "Too many session end requests",
    "commit": "Too many requests",
}


def get_services(request: Request) -> GateServices:
    """Return the service container attached to the application."""
    return request.app.state.services


# Type alias for the service container dependency
ServicesDep = Annotated[GateServices, Depends(get_services)]


def client_key(request: Request) -> str:
    """Identify the calling client for rate limiting.

    Args:
        request: Incoming request

    Returns:
        First ``X-Forwarded-For`` hop, else ``X-Real-IP``, else the peer host
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def origin_allowed(request: Request, settings: Settings) -> bool:
    """Return True if the Origin, or failing that the Referer, is allowed."""
    allowed = settings.allowed_origins
    origin = request.headers.get("origin")
    if origin and origin.rstrip("/") in allowed:
        return True
    referer = request.headers.get("referer")
    return bool(referer and any(referer.startswith(candidate) for candidate in allowed))


def require_same_origin(request: Request, services: ServicesDep) -> None:
    """Reject cross-origin calls.

    Raises:
        InvalidOriginError: If neither Origin nor Referer is allowed
    """
    if not origin_allowed(request, services.settings):
        raise InvalidOriginError()


def rate_limit_guard(name: str) -> Callable[[Request, GateServices], None]:
    """Build the origin + rate-limit guard for one endpoint category."""
    message = _RATE_LIMIT_MESSAGES.get(name, "Too many requests")

    def _guard(request: Request, services: ServicesDep) -> None:
        require_same_origin(request, services)
        decision = services.rate_limiter(name).check(client_key(request))
        if not decision.allowed:
            raise RateLimitedError(decision.reset_time, message)

    return _guard


def require_session_token(payload: AuthenticatedRequest, services: GateServices) -> None:
    """Validate the session token carried in a request body.

    Raises:
        InvalidTokenError: If the token does not match the address in any
            bucket of the trailing validity window
    """
    if not services.tokens.validate(payload.session_token, payload.player_address):
        raise InvalidTokenError()
