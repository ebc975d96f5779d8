from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaperNetworkSettings(BaseSettings):
    """Unified configuration for the paper network subsystem.

    Environment variables are prefixed with PAPER_NETWORK_.
    """

    model_config = SettingsConfigDict(env_prefix="PAPER_NETWORK_", extra="ignore")

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- Similarity backend ---
    backend_url: str = Field(default="http://localhost:5000")
    backend_api_key: str | None = Field(default=None, description="If set, sent as X-API-Key")
    expansion_limit: int = Field(default=20, ge=1, description="Max papers per expansion")

    # --- HTTP ---
    http_connect_timeout: float = 10.0
    http_read_timeout: float = 60.0
    http_retry_attempts: int = Field(default=5, ge=1)

    # --- Server ---
    bind_host: str = "0.0.0.0"
    bind_port: int = 8090
    max_sessions: int = Field(default=256, ge=1, description="Open sessions kept before the oldest is closed")


settings = PaperNetworkSettings()
