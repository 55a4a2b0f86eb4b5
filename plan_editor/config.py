"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PLAN_EDITOR_",
        extra="ignore",
    )

    # Conversation memory (messages, not exchanges)
    history_max_messages: int = 20

    # Defaults used when the generator leaves fields out
    default_activity_time: str = "12:00"
    preview_time_placeholder: str = "TBD"

    # Staged change retention (seconds); only used by the host-invoked sweep
    staging_retention_seconds: int = 3600

    # Cache
    redis_url: str | None = None

    # Text generator
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    llm_temperature: float = 0.7
    llm_max_tokens: int = 2000

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
