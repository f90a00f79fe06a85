"""Configuration settings for the Workout Coach core."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 1000
    llm_temperature: float = 0.3
    llm_timeout_seconds: float = 30.0

    # Storage
    database_path: Path = Path("workout_coach.db")

    # Conversation context
    history_limit: int = 5

    # Entity resolution
    lookup_cache_ttl_seconds: int = 30
    fuzzy_match_threshold: float = 0.3

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
