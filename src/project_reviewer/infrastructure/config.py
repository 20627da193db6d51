"""Runtime settings, read from the environment or a ``.env`` file."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Oracle ──────────────────────────────────────────────────────────
    openai_api_key: SecretStr
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    openai_timeout_seconds: float = Field(default=120.0, gt=0)
    openai_max_retries: int = Field(default=3, ge=0)

    # ── Exploration ─────────────────────────────────────────────────────
    max_files_to_review: int = Field(default=50, ge=0)
    max_file_size_bytes: int = Field(default=1_000_000, gt=0)
    max_file_tokens: int = Field(default=24_000, gt=0)
    review_concurrency: int = Field(default=1, ge=1)
    run_timeout_seconds: float | None = Field(default=None, gt=0)

    # ── Collaborators ───────────────────────────────────────────────────
    cache_dir: str | None = "./cache"
    cloc_executable: str = "cloc"

    # ── Server ──────────────────────────────────────────────────────────
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _blank_disables_cache(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
