"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - Timer polling stays at or below 100ms so tick drift stays within ±100ms
    - An empty cache_store_url means the puzzle cache runs in memory only
    - max_idle_timeouts = 0 keeps unattended sessions cycling rounds indefinitely

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for everything: the engine works out of the box against the public
      word and dictionary services with a local SQLite cache file
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scramble.core.domain_types import SupplyMode


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Rounds
    round_duration_seconds: int = Field(60, ge=1)
    round_complete_display_seconds: float = Field(2.0, ge=0)
    timeout_reveal_seconds: float = Field(5.0, ge=0)
    timer_poll_interval_ms: int = Field(50, ge=1, le=100)
    max_idle_timeouts: int = Field(3, ge=0)

    # Word supply
    default_mode: SupplyMode = SupplyMode.HYBRID
    default_tier: int = Field(1, ge=1, le=5)
    datamuse_base_url: str = "https://api.datamuse.com/words"
    remote_timeout_ms: int = Field(500, ge=1)
    remote_pool_size: int = Field(200, ge=1, le=1000)
    remote_max_attempts: int = Field(3, ge=1)

    # Dictionary collaborator
    dictionary_enabled: bool = True
    dictionary_base_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en"
    dictionary_timeout_ms: int = Field(1500, ge=1)
    dictionary_cache_size: int = Field(512, ge=0)

    # Puzzle cache
    cache_capacity: int = Field(200, ge=1)
    cache_store_url: str = "sqlite:///scramble_cache.db"
    cache_storage_key: str = "scramble-generated-cache"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("datamuse_base_url", "dictionary_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
