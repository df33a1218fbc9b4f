"""Application settings and configuration.

This module defines all configuration options for the Score Gate service.
Settings are loaded from environment variables with sensible defaults; the
only required value is the server secret used to derive session tokens.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    Constructing an instance without ``SESSION_SECRET`` fails, which keeps the
    service from starting without a token key.
    """

    # Application metadata
    app_name: str = Field(default="Score Gate", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    session_secret: str = Field(alias="SESSION_SECRET")
    app_url: str | None = Field(default=None, alias="APP_URL")
    nonce_ttl_ms: int = Field(default=5 * 60 * 1000, alias="NONCE_TTL_MS")
    token_bucket_ms: int = Field(default=30_000, alias="TOKEN_BUCKET_MS")
    token_window_ms: int = Field(default=5 * 60 * 1000, alias="TOKEN_WINDOW_MS")

    # Shared state backend
    store_backend: Literal["memory", "redis"] = Field(default="memory", alias="STORE_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    sweep_interval_seconds: float = Field(default=300.0, alias="SWEEP_INTERVAL_SECONDS")

    # Anti-cheat limits for game sessions
    max_shots_per_second: int = Field(default=10, alias="MAX_SHOTS_PER_SECOND")
    max_kills_per_second: int = Field(default=5, alias="MAX_KILLS_PER_SECOND")
    min_time_between_actions_ms: int = Field(default=50, alias="MIN_TIME_BETWEEN_ACTIONS_MS")
    max_session_duration_ms: int = Field(
        default=30 * 60 * 1000,
        alias="MAX_SESSION_DURATION_MS",
    )
    points_per_kill: int = Field(default=10, alias="POINTS_PER_KILL")
    max_score_per_session: int = Field(default=10_000, alias="MAX_SCORE_PER_SESSION")

    # Per-endpoint, per-client rate limits (requests per window)
    rate_limit_window_ms: int = Field(default=60_000, alias="RATE_LIMIT_WINDOW_MS")
    rate_limit_start: int = Field(default=5, alias="RATE_LIMIT_START")
    rate_limit_action: int = Field(default=100, alias="RATE_LIMIT_ACTION")
    rate_limit_end: int = Field(default=10, alias="RATE_LIMIT_END")
    rate_limit_commit: int = Field(default=10, alias="RATE_LIMIT_COMMIT")

    # Duplicate write protection
    dedup_ttl_ms: int = Field(default=5 * 60 * 1000, alias="DEDUP_TTL_MS")

    # Blockchain write collaborator
    rpc_url: str | None = Field(default=None, alias="RPC_URL")
    contract_address: str | None = Field(default=None, alias="CONTRACT_ADDRESS")
    wallet_private_key: str | None = Field(default=None, alias="WALLET_PRIVATE_KEY")

    # CORS configuration for web frontend access
    cors_allow_methods: list[str] = Field(
        default=["POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "x-api-key"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("session_secret")
    @classmethod
    def validate_session_secret(cls, v: str) -> str:
        """Reject blank secrets."""
        if not v.strip():
            raise ValueError("SESSION_SECRET must not be empty")
        return v

    @property
    def allowed_origins(self) -> list[str]:
        """Return the origins accepted by the same-origin check.

        Returns:
            Local development origins plus the configured application URL
        """
        origins = ["http://localhost:3000", "https://localhost:3000"]
        if self.app_url:
            origins.append(self.app_url.rstrip("/"))
        return origins

    @property
    def rate_limits(self) -> dict[str, int]:
        """Return the per-endpoint request ceilings keyed by limiter name."""
        return {
            "start": self.rate_limit_start,
            "action": self.rate_limit_action,
            "end": self.rate_limit_end,
            "commit": self.rate_limit_commit,
        }


settings = Settings()  # type: ignore[call-arg]
