# src/score_gate/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .game_session import router as game_session_router
from .scores import router as scores_router

__all__ = [
    "auth_router",
    "game_session_router",
    "scores_router",
]
