"""Shared fixtures: in-memory stores, a controllable clock and timer."""
from collections import Counter
from datetime import date, timedelta
from typing import Sequence

import pytest

from cycle_tracker.config.schedule_template import default_schedule_rows
from cycle_tracker.config.settings import Settings
from cycle_tracker.core.exceptions import PersistenceError
from cycle_tracker.models.enums import DayCategory
from cycle_tracker.schemas.fit_test import FitTestRecord
from cycle_tracker.schemas.schedule import ProgramDayDefinition
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.services.program_cycle import ProgramCycleEngine
from cycle_tracker.services.schedule_calculator import ScheduleCalculator, ScheduleTemplate


def default_days() -> list[ProgramDayDefinition]:
    return [
        ProgramDayDefinition(
            day_in_cycle=row["day_number"],
            category=DayCategory(row["category"]),
            name=row["name"],
            reference_duration_minutes=row["duration_minutes"],
        )
        for row in default_schedule_rows()
    ]


def workout_only_days(cycle_length: int = 63) -> list[ProgramDayDefinition]:
    return [
        ProgramDayDefinition(day_in_cycle=day, category=DayCategory.WORKOUT, name=f"Day {day}")
        for day in range(1, cycle_length + 1)
    ]


class InMemoryProgramStore:
    """
    Dict-backed program store.

    ``fail_on`` maps an operation name to the number of successful calls
    allowed before every further call raises ``PersistenceError``.
    """

    def __init__(self, days: Sequence[ProgramDayDefinition] = ()):
        self.days = list(days)
        self.sessions: dict[date, SessionRecord] = {}
        self.start_date: date | None = None
        self.fail_on: dict[str, int] = {}
        self.calls: Counter = Counter()
        self.batches: list[int] = []
        self._next_id = 1

    def _call(self, operation: str) -> None:
        allowed = self.fail_on.get(operation)
        self.calls[operation] += 1
        if allowed is not None and self.calls[operation] > allowed:
            raise PersistenceError(operation, f"{operation} failed")

    def _assign_id(self, record: SessionRecord) -> SessionRecord:
        record = record.model_copy(update={"id": self._next_id})
        self._next_id += 1
        return record

    async def get_all_schedule_days(self):
        self._call("get_all_schedule_days")
        return list(self.days)

    async def get_session_by_date(self, on_date):
        self._call("get_session_by_date")
        return self.sessions.get(on_date)

    async def get_all_sessions(self):
        self._call("get_all_sessions")
        # Reverse order so callers cannot rely on store ordering
        return sorted(self.sessions.values(), key=lambda s: s.date, reverse=True)

    async def insert_session(self, record):
        self._call("insert_session")
        if record.date in self.sessions:
            raise PersistenceError("insert_session", "duplicate date")
        record = self._assign_id(record)
        self.sessions[record.date] = record
        return record.id

    async def insert_sessions(self, records):
        self._call("insert_sessions")
        self.batches.append(len(records))
        ids = []
        for record in records:
            record = self._assign_id(record)
            self.sessions[record.date] = record
            ids.append(record.id)
        return ids

    async def update_session(self, record):
        self._call("update_session")
        existing = self.sessions.get(record.date)
        if existing is None or existing.id != record.id:
            return 0
        self.sessions[record.date] = record
        return 1

    async def upsert_sessions(self, records):
        self._call("upsert_sessions")
        for record in records:
            existing = self.sessions.get(record.date)
            if existing is not None:
                self.sessions[record.date] = record.model_copy(update={"id": existing.id})
            else:
                self.sessions[record.date] = self._assign_id(record)
        return len(records)

    async def delete_session_by_date(self, on_date):
        self._call("delete_session_by_date")
        return 1 if self.sessions.pop(on_date, None) is not None else 0

    async def delete_all_sessions(self):
        self._call("delete_all_sessions")
        self.sessions.clear()

    async def get_start_date(self):
        self._call("get_start_date")
        return self.start_date

    async def set_start_date(self, start_date):
        self._call("set_start_date")
        self.start_date = start_date

    async def clear_start_date(self):
        self._call("clear_start_date")
        self.start_date = None

    def seed(self, *records: SessionRecord) -> None:
        for record in records:
            record = self._assign_id(record)
            self.sessions[record.date] = record


class FakeFitTestStore:
    def __init__(self):
        self.results: dict[int, FitTestRecord] = {}
        self._next_id = 1

    async def get_all_fit_tests(self):
        return list(self.results.values())

    async def insert_fit_test(self, record):
        record = record.model_copy(update={"id": self._next_id})
        self.results[record.id] = record
        self._next_id += 1
        return record.id

    async def delete_fit_test(self, fit_test_id):
        return 1 if self.results.pop(fit_test_id, None) is not None else 0


class FakeClock:
    """Callable returning a settable "today"."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int = 1) -> None:
        self.today += timedelta(days=days)


class FakeTimer:
    """Monotonic seconds that only move when told to."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def template():
    return ScheduleTemplate(default_days())


@pytest.fixture
def calculator(template):
    return ScheduleCalculator(template)


@pytest.fixture
def store():
    return InMemoryProgramStore(default_days())


@pytest.fixture
def fit_test_store():
    return FakeFitTestStore()


@pytest.fixture
def clock():
    return FakeClock(date(2024, 1, 15))


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def settings():
    return Settings(cache_ttl_seconds=300.0, cache_refresh_strategy="lazy", backfill_batch_size=50)


@pytest.fixture
def engine(store, settings, clock, timer):
    return ProgramCycleEngine(store, settings, clock=clock, timer=timer)


@pytest.fixture
def workout_days():
    """63 plain workout days, no rest or fit test days."""
    return workout_only_days()


@pytest.fixture
def make_store():
    """Factory for stores seeded with an arbitrary schedule."""
    def _make(days=None):
        return InMemoryProgramStore(default_days() if days is None else days)
    return _make


@pytest.fixture
def make_engine(settings, clock, timer):
    """Factory for engines over a given store, sharing the test clock and timer."""
    def _make(store, **overrides):
        engine_settings = settings.model_copy(update=overrides) if overrides else settings
        return ProgramCycleEngine(store, engine_settings, clock=clock, timer=timer)
    return _make
