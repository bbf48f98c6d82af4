from enum import Enum


class DayCategory(str, Enum):
    WORKOUT = "workout"
    FIT_TEST = "fit_test"
    REST = "rest"

    @property
    def is_countable(self) -> bool:
        """Workout and fit test days count toward completion statistics."""
        return self is not DayCategory.REST


class SettingKey(str, Enum):
    PROGRAM_START_DATE = "program_start_date"
