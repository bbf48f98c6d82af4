"""Application configuration settings."""
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Cycle Tracker"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./cycle_tracker.db"

    # Program cycle
    cycle_length_days: int = 63
    anchor_weekday: int = 0  # Monday, matches date.weekday()

    # Cache
    cache_ttl_seconds: float = 300.0  # 5 minutes
    cache_refresh_strategy: Literal["lazy", "eager"] = "lazy"

    # Auto-completion
    backfill_batch_size: int = 50
    auto_complete_note: str = "Auto-completed"

    # Fit tests
    fit_test_interval_days: int = 14

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("cycle_length_days")
    @classmethod
    def _cycle_is_whole_weeks(cls, value: int) -> int:
        if value < 7 or value % 7 != 0:
            raise ValueError("cycle_length_days must be a positive multiple of 7")
        return value

    @field_validator("anchor_weekday")
    @classmethod
    def _weekday_in_range(cls, value: int) -> int:
        if not 0 <= value <= 6:
            raise ValueError("anchor_weekday must be between 0 (Monday) and 6 (Sunday)")
        return value

    @field_validator("backfill_batch_size")
    @classmethod
    def _positive_batch(cls, value: int) -> int:
        if value < 1:
            raise ValueError("backfill_batch_size must be at least 1")
        return value

    @property
    def cycle_length_weeks(self) -> int:
        return self.cycle_length_days // 7


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
