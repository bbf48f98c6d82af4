"""ORM models."""
from cycle_tracker.models.enums import DayCategory, SettingKey
from cycle_tracker.models.fit_test import FitTestResult
from cycle_tracker.models.program_day import ProgramDay
from cycle_tracker.models.program_setting import ProgramSetting
from cycle_tracker.models.workout_session import WorkoutSession

__all__ = [
    "DayCategory",
    "FitTestResult",
    "ProgramDay",
    "ProgramSetting",
    "SettingKey",
    "WorkoutSession",
]
