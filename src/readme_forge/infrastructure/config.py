"""Application configuration — loaded from environment variables.

Every field maps to an upper-cased environment variable of the same name
(``OPENAI_API_KEY``, ``GITHUB_TOKEN``, ``MAX_FILES_TO_FETCH`` …) and may also
come from a ``.env`` file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Generation service ──────────────────────────────────────────────
    openai_api_key: SecretStr
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None

    # ── GitHub ──────────────────────────────────────────────────────────
    github_token: SecretStr | None = None
    github_api_url: str = "https://api.github.com"
    request_interval_seconds: float = Field(default=1.0, ge=0)
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # ── Pipeline limits ─────────────────────────────────────────────────
    max_files_to_fetch: int = Field(default=30, ge=1)
    analysis_content_cap: int = Field(default=3000, ge=100)
    batch_delay_seconds: float = Field(default=1.0, ge=0)
    max_digest_tokens: int = Field(default=6000, ge=500)

    # ── Server ──────────────────────────────────────────────────────────
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("github_api_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        if v.upper() not in _LOG_LEVELS:
            msg = f"log_level must be one of {sorted(_LOG_LEVELS)}, got {v!r}"
            raise ValueError(msg)
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()  # type: ignore[call-arg]
