# src/score_gate/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import auth_router, game_session_router, scores_router

__all__ = [
    "auth_router",
    "game_session_router",
    "scores_router",
]
