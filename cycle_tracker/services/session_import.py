"""Builds session records for a historical date range being imported."""
from __future__ import annotations

from datetime import date, timedelta

from cycle_tracker.core.exceptions import ValidationError
from cycle_tracker.models.enums import DayCategory
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.services.schedule_calculator import ScheduleTemplate, normalize_date


def parse_relative_days(raw: str | None) -> list[int]:
    """Parse ``"3, 5,x,0,9"`` into ``[3, 5, 9]``; blanks, junk and values <= 0 are dropped."""
    if not raw:
        return []
    days = []
    for part in raw.split(","):
        part = part.strip()
        try:
            value = int(part)
        except ValueError:
            continue
        if value > 0:
            days.append(value)
    return days


def build_import_sessions(
    template: ScheduleTemplate,
    start_date: date,
    end_date: date,
    relative_days: list[int] | None = None,
    all_completed: bool = True,
    notes: str | None = None,
) -> list[SessionRecord]:
    """
    Session records for every date in ``[start_date, end_date]``.

    The first imported date is treated as day 1 of the program and positions
    wrap at the cycle length. Fit test days are left out. ``relative_days``
    lists 1-based positions in the range whose outcome is flipped: with
    ``all_completed`` they are imported as skipped, otherwise they are the
    only workout days imported as completed. Rest days are completed unless
    listed while importing everything as completed.

    Raises:
        ValidationError: If ``end_date`` is before ``start_date``
        ConfigurationError: If the schedule is empty or incomplete
    """
    start_date = normalize_date(start_date)
    end_date = normalize_date(end_date)
    if end_date < start_date:
        raise ValidationError("end_date", "End date cannot be before start date")
    template.validate()

    listed = set(relative_days or [])
    notes = notes.strip() if notes else None
    records = []
    for offset in range((end_date - start_date).days + 1):
        position = offset + 1
        scheduled = template.lookup(offset % template.cycle_length + 1)
        if scheduled.category is DayCategory.FIT_TEST:
            continue

        if scheduled.category is DayCategory.REST:
            completed = position not in listed if all_completed else True
        elif all_completed:
            completed = position not in listed
        else:
            completed = position in listed

        records.append(
            SessionRecord(
                date=start_date + timedelta(days=offset),
                completed=completed,
                scheduled_day_id=scheduled.day_in_cycle,
                notes=notes or None,
            )
        )
    return records
