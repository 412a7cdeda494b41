"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from loc_viewer.domain.entities import ContentStrategy, FailurePolicy, TruncationPolicy


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: SecretStr | None = None
    github_host: str = "github.com"
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"

    # Simultaneous content requests; tuned for the remote API, not for CPUs.
    max_concurrency: int = Field(default=32, ge=1)
    content_strategy: ContentStrategy = ContentStrategy.RAW
    failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST
    truncation_policy: TruncationPolicy = TruncationPolicy.BACKFILL
    pipeline_timeout_seconds: float | None = Field(default=None, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
