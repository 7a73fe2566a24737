"""
Hangman - Application Settings

Loads configuration from environment variables (prefix HANGMAN_) and an
optional .env file using Pydantic Settings.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Persistence
    storage_backend: Literal["memory", "file", "supabase"] = "memory"
    storage_dir: Path = Path(".hangman")
    storage_prefix: str = "hangman_"
    storage_max_bytes: int | None = None

    # Supabase (only needed for the supabase backend)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_table: str = "kv_store"

    # Word catalog
    catalog_url: str | None = None
    catalog_timeout: float = 10.0
    catalog_max_retries: int = Field(default=3, ge=0)
    catalog_cache_ttl_ms: int = 7 * 24 * 60 * 60 * 1000

    # Gameplay
    default_difficulty: Literal["easy", "medium", "hard"] = "medium"
    default_category: str = "animals"
    max_incorrect: int = Field(default=6, ge=1)
    auto_progression: bool = True
    history_capacity: int = Field(default=100, ge=1)

    # Timers (milliseconds)
    timed_tick_ms: int = Field(default=100, gt=0)
    default_time_limit_ms: int = Field(default=60000, gt=0)
    auto_continue_delay_ms: int = Field(default=1500, ge=0)
    auto_advance_delay_ms: int = Field(default=2000, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="HANGMAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()
