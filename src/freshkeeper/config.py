"""Application configuration.

Every knob is an environment variable prefixed with `FRESHKEEPER_`. Defaults suit a local
single-process deployment with file-based storage under `data/`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Freshkeeper settings.

    All fields are environment-configurable. Prefix is `FRESHKEEPER_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="FRESHKEEPER_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    app_env: Literal["dev", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO")

    # LLM
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_timeout_s: float = Field(default=120.0, ge=1.0, le=900.0)
    openai_max_tokens: int = Field(default=4000, ge=256, le=32000)

    # Reconciliation
    # Per-item budget for the serialized JSON shown to the model.
    reconcile_summary_max_chars: int = Field(default=2000, ge=200, le=20000)
    # A second attempt is only made for malformed output.
    reconcile_max_attempts: int = Field(default=2, ge=1, le=2)
    reconcile_token_ceiling: int = Field(default=24000, ge=1000, le=200000)

    # Evidence
    evidence_days_back: int = Field(default=7, ge=1, le=90)
    evidence_max_items: int = Field(default=20, ge=1, le=100)
    news_corpus_path: Path | None = Field(default=None)

    # Orchestrator
    orchestrator_delay_s: float = Field(default=1.0, ge=0.0, le=60.0)
    log_retention_days: int = Field(default=30, ge=1, le=3650)

    # Policies
    policies_path: Path | None = Field(default=None)

    # Redis (optional)
    redis_enabled: bool = Field(default=False)
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_key_prefix: str = Field(default="freshkeeper")

    # Storage
    data_dir: Path = Field(default=Path("data"))


def load_settings() -> Settings:
    """Load settings from the environment.

    `FRESHKEEPER_ENV_FILE` names an env file explicitly; otherwise a `.env` in the working
    directory is read when present.
    """

    override = os.getenv("FRESHKEEPER_ENV_FILE")
    env_file = Path(override) if override else Path.cwd() / ".env"
    if override or env_file.exists():
        return Settings(_env_file=env_file)
    return Settings()
