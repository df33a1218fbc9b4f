# src/score_gate/main.py
"""Main entry point for the score gate application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from score_gate.api.v1 import auth_router, game_session_router, scores_router
from score_gate.core.errors import GateError, InvalidRequestError
from score_gate.core.settings import Settings, settings
from score_gate.services.container import GateServices, build_services

logger = logging.getLogger(__name__)


async def gate_error_handler(request: Request, exc: GateError) -> JSONResponse:
    """Render a GateError as its JSON payload."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies as 400 with the missing or invalid fields."""
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = "Missing or invalid fields: " + ", ".join(fields) if fields else None
    error = InvalidRequestError(message)
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


def create_app(
    app_settings: Settings | None = None,
    services: GateServices | None = None,
) -> FastAPI:
    """Build the FastAPI application around a service container.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded ones.
        services: Pre-built services, e.g. with a fake clock or writer in tests.

    Returns:
        Configured application whose lifespan runs the maintenance worker
    """
    app_settings = app_settings or settings
    services = services or build_services(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await services.maintenance.start()
        logger.info("%s %s ready", app_settings.app_name, app_settings.app_version)
        try:
            yield
        finally:
            await services.maintenance.stop()

    app = FastAPI(
        title="Score Gate API",
        description="Wallet authentication and anti-cheat validation for on-chain scores",
        version=app_settings.app_version,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    app.add_exception_handler(GateError, gate_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]

    app.include_router(auth_router, prefix="/api")
    app.include_router(game_session_router, prefix="/api")
    app.include_router(scores_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    return app


logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("score_gate.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
