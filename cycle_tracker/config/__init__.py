"""Application configuration module.

This module organizes configuration into specialized files:

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Database URL, cycle length, anchor weekday, cache TTL, backfill batching
  - Loaded from .env file via pydantic-settings

- **schedule_template.py**: The default 63-day program table
  - Seeded into an empty store on first run
"""
from cycle_tracker.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
