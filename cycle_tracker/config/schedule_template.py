"""Default 63-day program schedule.

Nine weeks of seven days. Every seventh day is a rest day, fit tests open the
program, close the recovery week and finish month two. The table is seeded
into an empty store by ``seed_schedule``; at runtime the engine only ever reads
the schedule back from the store.
"""
from __future__ import annotations

from cycle_tracker.models.enums import DayCategory

# Reference durations in minutes, by workout name
WORKOUT_DURATIONS: dict[str, int] = {
    "Fit Test": 30,
    "Plyometric Cardio Circuit": 42,
    "Cardio Power & Resistance": 40,
    "Cardio Recovery": 33,
    "Pure Cardio": 39,
    "Core Cardio & Balance": 37,
    "Max Interval Circuit": 60,
    "Max Interval Plyo": 55,
    "Max Cardio Conditioning": 48,
    "Max Recovery": 48,
    "Insane Abs": 16,
    "Rest Day": 0,
}

# (day_number, name, category)
DEFAULT_SCHEDULE: tuple[tuple[int, str, DayCategory], ...] = (
    # Week 1
    (1, "Fit Test", DayCategory.FIT_TEST),
    (2, "Plyometric Cardio Circuit", DayCategory.WORKOUT),
    (3, "Cardio Power & Resistance", DayCategory.WORKOUT),
    (4, "Cardio Recovery", DayCategory.WORKOUT),
    (5, "Pure Cardio", DayCategory.WORKOUT),
    (6, "Plyometric Cardio Circuit", DayCategory.WORKOUT),
    (7, "Rest Day", DayCategory.REST),
    # Week 2
    (8, "Cardio Power & Resistance", DayCategory.WORKOUT),
    (9, "Plyometric Cardio Circuit", DayCategory.WORKOUT),
    (10, "Cardio Recovery", DayCategory.WORKOUT),
    (11, "Pure Cardio", DayCategory.WORKOUT),
    (12, "Cardio Power & Resistance", DayCategory.WORKOUT),
    (13, "Pure Cardio", DayCategory.WORKOUT),
    (14, "Rest Day", DayCategory.REST),
    # Week 3
    (15, "Plyometric Cardio Circuit", DayCategory.WORKOUT),
    (16, "Cardio Power & Resistance", DayCategory.WORKOUT),
    (17, "Cardio Recovery", DayCategory.WORKOUT),
    (18, "Pure Cardio", DayCategory.WORKOUT),
    (19, "Plyometric Cardio Circuit", DayCategory.WORKOUT),
    (20, "Cardio Power & Resistance", DayCategory.WORKOUT),
    (21, "Rest Day", DayCategory.REST),
    # Week 4
    (22, "Pure Cardio", DayCategory.WORKOUT),
    (23, "Plyometric Cardio Circuit", DayCategory.WORKOUT),
    (24, "Cardio Recovery", DayCategory.WORKOUT),
    (25, "Cardio Power & Resistance", DayCategory.WORKOUT),
    (26, "Pure Cardio", DayCategory.WORKOUT),
    (27, "Plyometric Cardio Circuit", DayCategory.WORKOUT),
    (28, "Rest Day", DayCategory.REST),
    # Week 5 - recovery week
    (29, "Core Cardio & Balance", DayCategory.WORKOUT),
    (30, "Fit Test", DayCategory.FIT_TEST),
    (31, "Core Cardio & Balance", DayCategory.WORKOUT),
    (32, "Core Cardio & Balance", DayCategory.WORKOUT),
    (33, "Core Cardio & Balance", DayCategory.WORKOUT),
    (34, "Core Cardio & Balance", DayCategory.WORKOUT),
    (35, "Rest Day", DayCategory.REST),
    # Week 6 - month 2 begins
    (36, "Max Interval Circuit", DayCategory.WORKOUT),
    (37, "Max Interval Plyo", DayCategory.WORKOUT),
    (38, "Max Cardio Conditioning", DayCategory.WORKOUT),
    (39, "Max Recovery", DayCategory.WORKOUT),
    (40, "Max Interval Circuit", DayCategory.WORKOUT),
    (41, "Max Interval Plyo", DayCategory.WORKOUT),
    (42, "Rest Day", DayCategory.REST),
    # Week 7
    (43, "Max Cardio Conditioning", DayCategory.WORKOUT),
    (44, "Insane Abs", DayCategory.WORKOUT),
    (45, "Max Recovery", DayCategory.WORKOUT),
    (46, "Max Interval Circuit", DayCategory.WORKOUT),
    (47, "Max Cardio Conditioning", DayCategory.WORKOUT),
    (48, "Insane Abs", DayCategory.WORKOUT),
    (49, "Rest Day", DayCategory.REST),
    # Week 8
    (50, "Max Interval Plyo", DayCategory.WORKOUT),
    (51, "Max Cardio Conditioning", DayCategory.WORKOUT),
    (52, "Max Recovery", DayCategory.WORKOUT),
    (53, "Max Interval Circuit", DayCategory.WORKOUT),
    (54, "Max Interval Plyo", DayCategory.WORKOUT),
    (55, "Insane Abs", DayCategory.WORKOUT),
    (56, "Rest Day", DayCategory.REST),
    # Week 9 - final week
    (57, "Max Cardio Conditioning", DayCategory.WORKOUT),
    (58, "Max Recovery", DayCategory.WORKOUT),
    (59, "Insane Abs", DayCategory.WORKOUT),
    (60, "Fit Test", DayCategory.FIT_TEST),
    (61, "Max Interval Circuit", DayCategory.WORKOUT),
    (62, "Max Recovery", DayCategory.WORKOUT),
    (63, "Rest Day", DayCategory.REST),
)


def default_schedule_rows() -> list[dict]:
    """Rows for the ``program_days`` table, one per day in the cycle."""
    return [
        {
            "day_number": day_number,
            "name": name,
            "category": category.value,
            "duration_minutes": WORKOUT_DURATIONS.get(name, 0),
        }
        for day_number, name, category in DEFAULT_SCHEDULE
    ]
