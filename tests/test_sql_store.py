"""Integration tests for the SQLAlchemy store on a temporary SQLite database."""
from datetime import date

import pytest
import pytest_asyncio

from cycle_tracker.config.schedule_template import default_schedule_rows
from cycle_tracker.core.exceptions import PersistenceError
from cycle_tracker.db.database import close_engine, create_engine, create_session_maker, init_db
from cycle_tracker.models.enums import DayCategory
from cycle_tracker.repositories.base import FitTestStore, ProgramStore
from cycle_tracker.repositories.store import SqlProgramStore
from cycle_tracker.schemas.fit_test import MOVEMENT_FIELDS, FitTestRecord
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.services.program_cycle import ProgramCycleEngine

START = date(2024, 1, 1)


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """Store over a fresh database with the default schedule seeded."""
    db_engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'cycle.db'}", echo=False)
    await init_db(db_engine)
    store = SqlProgramStore(create_session_maker(db_engine))
    await store.seed_schedule()
    yield store
    await close_engine(db_engine)


class TestSchedule:
    @pytest.mark.asyncio
    async def test_seeded_schedule(self, sql_store):
        days = await sql_store.get_all_schedule_days()

        assert [d.day_in_cycle for d in days] == list(range(1, 64))
        assert days[0].category is DayCategory.FIT_TEST
        assert days[6].category is DayCategory.REST

    def test_seed_rows_use_category_values(self):
        categories = {row["category"] for row in default_schedule_rows()}

        assert categories == {category.value for category in DayCategory}

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, sql_store):
        assert await sql_store.seed_schedule() == 0

    @pytest.mark.asyncio
    async def test_satisfies_store_protocols(self, sql_store):
        assert isinstance(sql_store, ProgramStore)
        assert isinstance(sql_store, FitTestStore)


class TestSessions:
    @pytest.mark.asyncio
    async def test_insert_and_get_by_date(self, sql_store):
        new_id = await sql_store.insert_session(
            SessionRecord(date=START, completed=True, scheduled_day_id=1, notes="first")
        )

        record = await sql_store.get_session_by_date(START)

        assert record.id == new_id
        assert record.completed is True
        assert record.notes == "first"
        assert await sql_store.get_session_by_date(date(2024, 1, 2)) is None

    @pytest.mark.asyncio
    async def test_duplicate_date_is_a_persistence_error(self, sql_store):
        await sql_store.insert_session(SessionRecord(date=START, completed=True))

        with pytest.raises(PersistenceError) as exc_info:
            await sql_store.insert_session(SessionRecord(date=START, completed=False))

        assert exc_info.value.operation == "insert_session"

    @pytest.mark.asyncio
    async def test_update_requires_id(self, sql_store):
        with pytest.raises(PersistenceError):
            await sql_store.update_session(SessionRecord(date=START))

    @pytest.mark.asyncio
    async def test_update(self, sql_store):
        await sql_store.insert_session(SessionRecord(date=START, completed=True))
        record = await sql_store.get_session_by_date(START)

        updated = await sql_store.update_session(record.model_copy(update={"completed": False}))

        assert updated == 1
        assert (await sql_store.get_session_by_date(START)).completed is False

    @pytest.mark.asyncio
    async def test_upsert_by_date(self, sql_store):
        await sql_store.insert_session(SessionRecord(date=START, completed=False))

        await sql_store.upsert_sessions([
            SessionRecord(date=START, completed=True),
            SessionRecord(date=date(2024, 1, 2), completed=True),
        ])

        sessions = await sql_store.get_all_sessions()
        assert [(s.date, s.completed) for s in sessions] == [
            (START, True),
            (date(2024, 1, 2), True),
        ]

    @pytest.mark.asyncio
    async def test_batch_insert_and_deletes(self, sql_store):
        ids = await sql_store.insert_sessions([
            SessionRecord(date=date(2024, 1, day), completed=True) for day in range(1, 6)
        ])
        assert len(ids) == 5

        assert await sql_store.delete_session_by_date(date(2024, 1, 3)) == 1
        assert len(await sql_store.get_all_sessions()) == 4

        await sql_store.delete_all_sessions()
        assert await sql_store.get_all_sessions() == []


class TestStartDate:
    @pytest.mark.asyncio
    async def test_round_trip_and_clear(self, sql_store):
        assert await sql_store.get_start_date() is None

        await sql_store.set_start_date(START)
        await sql_store.set_start_date(date(2024, 1, 8))
        assert await sql_store.get_start_date() == date(2024, 1, 8)

        await sql_store.clear_start_date()
        assert await sql_store.get_start_date() is None


class TestFitTests:
    @pytest.mark.asyncio
    async def test_insert_list_delete(self, sql_store):
        record = FitTestRecord(
            test_date=START, test_number=1, **{name: 10 for name in MOVEMENT_FIELDS}
        )

        new_id = await sql_store.insert_fit_test(record)
        results = await sql_store.get_all_fit_tests()

        assert [r.id for r in results] == [new_id]
        assert results[0].total_reps == 10 * len(MOVEMENT_FIELDS)
        assert await sql_store.delete_fit_test(new_id) == 1
        assert await sql_store.get_all_fit_tests() == []


class TestEngineOnSqlStore:
    @pytest.mark.asyncio
    async def test_start_date_backfill_persists(self, sql_store, settings, clock, timer):
        engine = ProgramCycleEngine(sql_store, settings, clock=clock, timer=timer)
        await engine.initialize()

        await engine.set_start_date(START)
        await engine.complete_workout(notes="logged")

        sessions = await sql_store.get_all_sessions()
        assert len(sessions) == 13
        assert sessions[-1].notes == "logged"
        assert engine.current_cycle_stats().completed == 13
        assert engine.current_streak() == 1
