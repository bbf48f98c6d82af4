"""
ProgressAggregator - summary statistics over the session log.

Responsible for:
- Completed / skipped / remaining tallies for the cycle containing today
- Percentage progress through the current cycle and completed cycle count
- The sessions logged in the current week of the cycle
- The current streak of consecutive completed days

Only workout and fit test days are countable; rest days never contribute to
completion statistics. An unset start date or an empty schedule is a normal
state and yields empty results rather than errors.
"""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Iterable, Sequence

from cycle_tracker.schemas.schedule import DAYS_PER_WEEK
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.schemas.stats import CycleStats, OverallProgress
from cycle_tracker.services.schedule_calculator import (
    ScheduleCalculator,
    days_since_start,
    normalize_date,
    week_in_cycle_for,
)


def index_by_date(sessions: Iterable[SessionRecord]) -> dict[date, SessionRecord]:
    return {s.date: s for s in sessions}


class ProgressAggregator:
    """Stateless statistics over a session list, a start date and today."""

    def __init__(self, calculator: ScheduleCalculator):
        self._calculator = calculator

    @property
    def _template(self):
        return self._calculator.template

    def current_cycle_stats(
        self,
        sessions: Sequence[SessionRecord],
        start_date: date | None,
        today: date,
    ) -> CycleStats:
        """
        Tally countable days of the cycle containing ``today``.

        A countable day is completed when a completed record exists for its
        date and skipped when a non-completed record exists, or when it lies
        strictly before today with no record at all. Today and future days
        without a record are still remaining.
        """
        if start_date is None or self._template.is_empty:
            return CycleStats()

        total = len(self._template.countable_days())
        if total == 0:
            return CycleStats()

        today = normalize_date(today)
        cycle_start = self._calculator.cycle_start_for(start_date, today)
        if cycle_start is None:
            return CycleStats(remaining=total, total_in_cycle=total)

        by_date = index_by_date(sessions)
        completed = 0
        skipped = 0
        for offset in range(self._calculator.cycle_length):
            scheduled = self._template.get(offset + 1)
            if scheduled is None or not scheduled.is_countable:
                continue

            on_date = cycle_start + timedelta(days=offset)
            record = by_date.get(on_date)
            if record is not None:
                if record.completed:
                    completed += 1
                else:
                    skipped += 1
            elif on_date < today:
                skipped += 1

        remaining = max(0, total - completed - skipped)
        return CycleStats(
            completed=completed,
            skipped=skipped,
            remaining=remaining,
            total_in_cycle=total,
        )

    def overall_progress(
        self,
        sessions: Sequence[SessionRecord],
        start_date: date | None,
        today: date,
    ) -> OverallProgress:
        """Percentage of the current cycle's countable days completed, and cycles finished."""
        if start_date is None or self._template.is_empty:
            return OverallProgress()

        offset = days_since_start(start_date, today)
        if offset < 0:
            return OverallProgress()

        stats = self.current_cycle_stats(sessions, start_date, today)
        if stats.total_in_cycle:
            progress = stats.completed / stats.total_in_cycle * 100
        else:
            progress = 0.0
        if math.isnan(progress):
            progress = 0.0
        progress = min(100.0, max(0.0, progress))

        return OverallProgress(
            current_cycle_progress=progress,
            completed_cycles=offset // self._calculator.cycle_length,
        )

    def this_week_sessions(
        self,
        sessions: Sequence[SessionRecord],
        start_date: date | None,
        today: date,
    ) -> list[SessionRecord]:
        """Records inside the 7-day window of the current week of the cycle, in date order."""
        if start_date is None or self._template.is_empty:
            return []

        day_in_cycle = self._calculator.cycle_day_for(start_date, today)
        if day_in_cycle is None:
            return []

        cycle_start = self._calculator.cycle_start_for(start_date, today)
        week_start = cycle_start + timedelta(
            days=(week_in_cycle_for(day_in_cycle) - 1) * DAYS_PER_WEEK
        )
        by_date = index_by_date(sessions)
        week = []
        for offset in range(DAYS_PER_WEEK):
            record = by_date.get(week_start + timedelta(days=offset))
            if record is not None:
                week.append(record)
        return week

    @staticmethod
    def current_streak(sessions: Iterable[SessionRecord]) -> int:
        """
        Consecutive completed days counted back from the latest record.

        Walks records newest first and stops at the first non-completed record
        or the first gap of more than one calendar day.
        """
        ordered = sorted(sessions, key=lambda s: s.date, reverse=True)
        streak = 0
        previous: date | None = None
        for record in ordered:
            if not record.completed:
                break
            if previous is not None and (previous - record.date).days != 1:
                break
            streak += 1
            previous = record.date
        return streak
