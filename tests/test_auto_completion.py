"""Tests for backfilling elapsed program days."""
from datetime import date, timedelta

import pytest

from cycle_tracker.core.exceptions import ConfigurationError, PersistenceError
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.services.auto_completion import AutoCompletionEngine
from cycle_tracker.services.schedule_calculator import ScheduleCalculator, ScheduleTemplate

START = date(2024, 1, 1)


def make_backfill(store, days, batch_size=50):
    return AutoCompletionEngine(store, ScheduleCalculator(ScheduleTemplate(days)), batch_size=batch_size)


class TestAutoCompletion:
    """Backfill visits [start, today) in order and never overwrites."""

    @pytest.mark.asyncio
    async def test_all_workout_schedule_backfills_every_day(self, make_store, workout_days):
        """Ten elapsed workout days produce ten completed, marked records."""
        store = make_store(workout_days)
        backfill = make_backfill(store, workout_days)

        result = await backfill.run(START, date(2024, 1, 11))

        assert result.inserted == 10
        assert sorted(store.sessions) == [START + timedelta(days=i) for i in range(10)]
        for offset, on_date in enumerate(sorted(store.sessions)):
            record = store.sessions[on_date]
            assert record.completed is True
            assert record.notes == "Auto-completed"
            assert record.scheduled_day_id == offset + 1

    @pytest.mark.asyncio
    async def test_rest_days_are_not_logged(self, store, calculator):
        backfill = AutoCompletionEngine(store, calculator)

        result = await backfill.run(START, date(2024, 1, 15))

        assert result.inserted == 12
        assert result.skipped_rest == 2
        assert date(2024, 1, 7) not in store.sessions
        assert date(2024, 1, 14) not in store.sessions
        assert date(2024, 1, 15) not in store.sessions

    @pytest.mark.asyncio
    async def test_existing_records_are_kept(self, store, calculator):
        store.seed(SessionRecord(date=date(2024, 1, 3), completed=False, notes="sick"))
        backfill = AutoCompletionEngine(store, calculator)

        result = await backfill.run(START, date(2024, 1, 8))

        assert result.skipped_existing == 1
        assert store.sessions[date(2024, 1, 3)].completed is False
        assert store.sessions[date(2024, 1, 3)].notes == "sick"

    @pytest.mark.asyncio
    async def test_second_run_inserts_nothing(self, store, calculator):
        backfill = AutoCompletionEngine(store, calculator)
        await backfill.run(START, date(2024, 1, 15))
        snapshot = dict(store.sessions)

        result = await backfill.run(START, date(2024, 1, 15))

        assert result.inserted == 0
        assert store.sessions == snapshot

    @pytest.mark.asyncio
    async def test_writes_in_bounded_batches(self, make_store, workout_days):
        store = make_store(workout_days)
        backfill = make_backfill(store, workout_days, batch_size=4)

        result = await backfill.run(START, date(2024, 1, 11))

        assert store.batches == [4, 4, 2]
        assert result.batches == 3

    @pytest.mark.asyncio
    async def test_start_today_or_later_does_nothing(self, store, calculator):
        backfill = AutoCompletionEngine(store, calculator)

        result = await backfill.run(date(2024, 1, 15), date(2024, 1, 15))

        assert result.days_visited == 0
        assert store.calls["insert_sessions"] == 0

    @pytest.mark.asyncio
    async def test_positions_wrap_into_next_cycle(self, make_store, workout_days):
        store = make_store(workout_days)
        backfill = make_backfill(store, workout_days)
        today = START + timedelta(days=65)

        await backfill.run(START, today)

        assert store.sessions[START + timedelta(days=63)].scheduled_day_id == 1
        assert store.sessions[START + timedelta(days=64)].scheduled_day_id == 2

    @pytest.mark.asyncio
    async def test_empty_schedule_writes_nothing(self, make_store):
        store = make_store([])
        backfill = make_backfill(store, [])

        with pytest.raises(ConfigurationError):
            await backfill.run(START, date(2024, 1, 15))

        assert store.calls["insert_sessions"] == 0
        assert store.sessions == {}

    @pytest.mark.asyncio
    async def test_failed_batch_keeps_earlier_batches(self, make_store, workout_days):
        store = make_store(workout_days)
        store.fail_on["insert_sessions"] = 1
        backfill = make_backfill(store, workout_days, batch_size=4)

        with pytest.raises(PersistenceError) as exc_info:
            await backfill.run(START, date(2024, 1, 11))

        assert exc_info.value.operation == "auto_complete"
        assert exc_info.value.details["inserted_before_failure"] == 4
        assert exc_info.value.details["failed_batch_start"] == "2024-01-05"
        assert len(store.sessions) == 4
