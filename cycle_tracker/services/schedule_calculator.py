"""
Mapping between calendar dates and positions in the repeating program.

Responsible for:
- Cycle position (day 1-63) and cycle number of a calendar date
- Week-in-cycle derivation
- Looking up the scheduled day definition for a position
- Anchor weekday checks for program start dates

Everything here is pure; callers memoize through the cache layer.
"""
from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable

from cycle_tracker.core.exceptions import ConfigurationError, ScheduleLookupError
from cycle_tracker.models.enums import DayCategory
from cycle_tracker.schemas.schedule import DAYS_PER_WEEK, ProgramDayDefinition, week_in_cycle_for

DEFAULT_CYCLE_LENGTH_DAYS = 63

__all__ = [
    "DEFAULT_CYCLE_LENGTH_DAYS",
    "ScheduleCalculator",
    "ScheduleTemplate",
    "cycle_day_for",
    "cycle_number_for",
    "cycle_start_for",
    "days_since_start",
    "is_anchor_date",
    "nearest_anchor_date",
    "normalize_date",
    "week_in_cycle_for",
]


def normalize_date(value: date | datetime) -> date:
    """Drop the time of day; dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_since_start(start_date: date | datetime, on_date: date | datetime) -> int:
    """Whole days from ``start_date`` to ``on_date`` (negative if before)."""
    return (normalize_date(on_date) - normalize_date(start_date)).days


def cycle_day_for(
    start_date: date | datetime,
    on_date: date | datetime,
    cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
) -> int | None:
    """Day in cycle (1-based) of ``on_date``, or None before the start date."""
    offset = days_since_start(start_date, on_date)
    if offset < 0:
        return None
    return offset % cycle_length + 1


def cycle_number_for(
    start_date: date | datetime,
    on_date: date | datetime,
    cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
) -> int | None:
    """Cycle count (1-based) that ``on_date`` falls in, or None before the start date."""
    offset = days_since_start(start_date, on_date)
    if offset < 0:
        return None
    return offset // cycle_length + 1


def cycle_start_for(
    start_date: date | datetime,
    on_date: date | datetime,
    cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
) -> date | None:
    """Calendar date of day 1 of the cycle containing ``on_date``."""
    offset = days_since_start(start_date, on_date)
    if offset < 0:
        return None
    completed_cycles = offset // cycle_length
    return normalize_date(start_date) + timedelta(days=completed_cycles * cycle_length)


def is_anchor_date(value: date | datetime, anchor_weekday: int = 0) -> bool:
    return normalize_date(value).weekday() == anchor_weekday


def nearest_anchor_date(
    value: date | datetime,
    anchor_weekday: int = 0,
    allow_future: bool = True,
) -> date:
    """
    The anchor weekday closest to ``value`` in one direction.

    Returns ``value`` itself when it already falls on the anchor weekday,
    otherwise the next anchor day (``allow_future``) or the previous one.
    """
    day = normalize_date(value)
    if allow_future:
        return day + timedelta(days=(anchor_weekday - day.weekday()) % 7)
    return day - timedelta(days=(day.weekday() - anchor_weekday) % 7)


class ScheduleTemplate:
    """
    Read-only table of program day definitions keyed by day in cycle.

    The template is not validated on construction so that an incomplete store
    can still be loaded and reported; ``validate`` raises when the days do not
    cover ``1..cycle_length`` exactly once.
    """

    def __init__(
        self,
        days: Iterable[ProgramDayDefinition],
        cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
    ):
        days = list(days)
        self.cycle_length = cycle_length
        self._by_day: dict[int, ProgramDayDefinition] = {d.day_in_cycle: d for d in days}
        counts = Counter(d.day_in_cycle for d in days)
        self._duplicates = sorted(day for day, n in counts.items() if n > 1)

    def __len__(self) -> int:
        return len(self._by_day)

    def __iter__(self):
        return iter(self.days)

    @property
    def days(self) -> tuple[ProgramDayDefinition, ...]:
        return tuple(self._by_day[day] for day in sorted(self._by_day))

    @property
    def is_empty(self) -> bool:
        return not self._by_day

    def missing_days(self) -> list[int]:
        return [day for day in range(1, self.cycle_length + 1) if day not in self._by_day]

    def unexpected_days(self) -> list[int]:
        return sorted(day for day in self._by_day if not 1 <= day <= self.cycle_length)

    @property
    def is_complete(self) -> bool:
        return not (self.missing_days() or self.unexpected_days() or self._duplicates)

    def validate(self) -> None:
        """Raise ``ConfigurationError`` unless the template covers the cycle exactly."""
        if self.is_empty:
            raise ConfigurationError(
                "Program schedule is empty",
                code="CFG_SCHEDULE_EMPTY",
            )
        if not self.is_complete:
            raise ConfigurationError(
                "Program schedule does not cover every day of the cycle",
                code="CFG_SCHEDULE_INCOMPLETE",
                details={
                    "missing_days": self.missing_days(),
                    "unexpected_days": self.unexpected_days(),
                    "duplicate_days": self._duplicates,
                },
            )

    def get(self, day_in_cycle: int) -> ProgramDayDefinition | None:
        return self._by_day.get(day_in_cycle)

    def lookup(self, day_in_cycle: int) -> ProgramDayDefinition:
        definition = self._by_day.get(day_in_cycle)
        if definition is None:
            raise ScheduleLookupError(day_in_cycle)
        return definition

    def week(self, week_in_cycle: int) -> list[ProgramDayDefinition]:
        return [d for d in self.days if d.week_in_cycle == week_in_cycle]

    def countable_days(self) -> list[ProgramDayDefinition]:
        return [d for d in self.days if d.is_countable]

    def count_by_category(self) -> dict[DayCategory, int]:
        counts = Counter(d.category for d in self.days)
        return {category: counts.get(category, 0) for category in DayCategory}


class ScheduleCalculator:
    """Date arithmetic bound to a template and cycle length."""

    def __init__(self, template: ScheduleTemplate):
        self.template = template

    @property
    def cycle_length(self) -> int:
        return self.template.cycle_length

    @property
    def weeks_in_cycle(self) -> int:
        return self.cycle_length // DAYS_PER_WEEK

    def cycle_day_for(self, start_date: date | datetime, on_date: date | datetime) -> int | None:
        return cycle_day_for(start_date, on_date, self.cycle_length)

    def cycle_number_for(self, start_date: date | datetime, on_date: date | datetime) -> int | None:
        return cycle_number_for(start_date, on_date, self.cycle_length)

    def cycle_start_for(self, start_date: date | datetime, on_date: date | datetime) -> date | None:
        return cycle_start_for(start_date, on_date, self.cycle_length)

    @staticmethod
    def week_in_cycle_for(day_in_cycle: int) -> int:
        return week_in_cycle_for(day_in_cycle)

    def scheduled_day_for(self, day_in_cycle: int) -> ProgramDayDefinition:
        """Definition for a cycle position; ``ScheduleLookupError`` if undefined."""
        return self.template.lookup(day_in_cycle)

    def scheduled_day_on(
        self,
        start_date: date | datetime,
        on_date: date | datetime,
    ) -> ProgramDayDefinition | None:
        """Definition scheduled on a calendar date, None before the start date."""
        day_in_cycle = self.cycle_day_for(start_date, on_date)
        if day_in_cycle is None:
            return None
        return self.scheduled_day_for(day_in_cycle)
