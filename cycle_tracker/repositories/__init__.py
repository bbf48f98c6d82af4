"""Repositories package."""
from cycle_tracker.repositories.base import FitTestStore, ProgramStore
from cycle_tracker.repositories.fit_test_repository import FitTestRepository
from cycle_tracker.repositories.schedule_repository import ScheduleRepository
from cycle_tracker.repositories.session_repository import SessionRepository
from cycle_tracker.repositories.settings_repository import SettingsRepository
from cycle_tracker.repositories.store import SqlProgramStore

__all__ = [
    "FitTestStore",
    "ProgramStore",
    "FitTestRepository",
    "ScheduleRepository",
    "SessionRepository",
    "SettingsRepository",
    "SqlProgramStore",
]
