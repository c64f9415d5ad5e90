"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `AREC_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Agent settings.

    All fields are environment-configurable. Prefix is `AREC_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="AREC_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    log_level: str = Field(default="INFO")

    # Loop
    planner: Literal["llm", "mock"] = Field(default="llm")
    max_cycles: int = Field(default=5, ge=1, le=50)
    # Corrective re-prompts after a malformed plan before the run is aborted
    plan_max_retries: int = Field(default=1, ge=0, le=5)

    # LLM
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_timeout_s: float = Field(default=120.0)

    # Search
    search_provider: Literal["tavily", "duckduckgo", "mock"] = Field(default="duckduckgo")
    search_max_results: int = Field(default=5, ge=1, le=50)

    tavily_api_key: str | None = Field(default=None)
    tavily_api_base_url: str = Field(default="https://api.tavily.com")
    tavily_search_depth: Literal["basic", "advanced"] = Field(default="basic")
    tavily_timeout_s: float = Field(default=30.0, ge=1.0, le=300.0)
    tavily_max_retries: int = Field(default=2, ge=0, le=10)
    tavily_retry_backoff_s: float = Field(default=0.75, ge=0.0, le=30.0)

    # Scrape
    scrape_snippet_chars: int = Field(default=500, ge=1, le=100_000)
    http_timeout_s: float = Field(default=30.0)
    http_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        )
    )

    # Artifacts
    record_events: bool = Field(default=False)
    artifacts_dir: Path = Field(default=Path("artifacts"))


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("AREC_ENV_FILE")
    if env_file_override:
        return Settings(_env_file=Path(env_file_override))

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
