"""SQLAlchemy-backed implementation of the program store contracts.

Each public call runs in its own transaction. Driver and ORM failures are
converted to ``PersistenceError`` here so nothing above this layer needs to
know about SQLAlchemy.
"""
from __future__ import annotations

from datetime import date
from typing import Awaitable, Callable, Sequence, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cycle_tracker.config.schedule_template import default_schedule_rows
from cycle_tracker.core.exceptions import PersistenceError
from cycle_tracker.core.logging import get_logger
from cycle_tracker.models.enums import SettingKey
from cycle_tracker.repositories.fit_test_repository import FitTestRepository
from cycle_tracker.repositories.schedule_repository import ScheduleRepository
from cycle_tracker.repositories.session_repository import SessionRepository
from cycle_tracker.repositories.settings_repository import SettingsRepository
from cycle_tracker.schemas.fit_test import FitTestRecord
from cycle_tracker.schemas.schedule import ProgramDayDefinition
from cycle_tracker.schemas.session import SessionRecord

logger = get_logger(__name__)

T = TypeVar('T')


class SqlProgramStore:
    """Program and fit test store over an ``async_sessionmaker``."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def _run(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    return await work(session)
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation=operation, error=str(e))
            raise PersistenceError(operation, f"Store operation '{operation}' failed: {e}") from e

    # Schedule

    async def get_all_schedule_days(self) -> list[ProgramDayDefinition]:
        async def work(session: AsyncSession) -> list[ProgramDayDefinition]:
            rows = await ScheduleRepository(session).list_all()
            return [ProgramDayDefinition.from_model(row) for row in rows]
        return await self._run("get_all_schedule_days", work)

    async def seed_schedule(self, rows: list[dict] | None = None) -> int:
        """Insert the default schedule if the table is empty.

        Returns:
            Number of rows inserted (0 when a schedule already exists)
        """
        async def work(session: AsyncSession) -> int:
            repo = ScheduleRepository(session)
            if await repo.count() > 0:
                return 0
            return await repo.bulk_create(rows if rows is not None else default_schedule_rows())
        inserted = await self._run("seed_schedule", work)
        if inserted:
            logger.info("schedule_seeded", days=inserted)
        return inserted

    # Sessions

    async def get_session_by_date(self, on_date: date) -> SessionRecord | None:
        async def work(session: AsyncSession) -> SessionRecord | None:
            row = await SessionRepository(session).get_by_date(on_date)
            return SessionRecord.from_model(row) if row is not None else None
        return await self._run("get_session_by_date", work)

    async def get_all_sessions(self) -> list[SessionRecord]:
        async def work(session: AsyncSession) -> list[SessionRecord]:
            rows = await SessionRepository(session).list_all()
            return [SessionRecord.from_model(row) for row in rows]
        return await self._run("get_all_sessions", work)

    async def insert_session(self, record: SessionRecord) -> int:
        async def work(session: AsyncSession) -> int:
            entity = await SessionRepository(session).create(record)
            return entity.id
        return await self._run("insert_session", work)

    async def insert_sessions(self, records: Sequence[SessionRecord]) -> list[int]:
        async def work(session: AsyncSession) -> list[int]:
            entities = await SessionRepository(session).create_many(list(records))
            return [entity.id for entity in entities]
        return await self._run("insert_sessions", work)

    async def update_session(self, record: SessionRecord) -> int:
        if record.id is None:
            raise PersistenceError("update_session", "Cannot update a session that has no id")

        async def work(session: AsyncSession) -> int:
            return await SessionRepository(session).update(record)
        return await self._run("update_session", work)

    async def upsert_sessions(self, records: Sequence[SessionRecord]) -> int:
        async def work(session: AsyncSession) -> int:
            repo = SessionRepository(session)
            for record in records:
                await repo.upsert(record)
            return len(records)
        return await self._run("upsert_sessions", work)

    async def delete_session_by_date(self, on_date: date) -> int:
        async def work(session: AsyncSession) -> int:
            return await SessionRepository(session).delete_by_date(on_date)
        return await self._run("delete_session_by_date", work)

    async def delete_all_sessions(self) -> None:
        async def work(session: AsyncSession) -> None:
            deleted = await SessionRepository(session).delete_all()
            logger.info("sessions_deleted", count=deleted)
        await self._run("delete_all_sessions", work)

    # Start date

    async def get_start_date(self) -> date | None:
        async def work(session: AsyncSession) -> str | None:
            return await SettingsRepository(session).get(SettingKey.PROGRAM_START_DATE.value)
        raw = await self._run("get_start_date", work)
        if raw is None:
            return None
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            logger.warning("start_date_unreadable", value=raw)
            return None

    async def set_start_date(self, start_date: date) -> None:
        async def work(session: AsyncSession) -> None:
            await SettingsRepository(session).set(
                SettingKey.PROGRAM_START_DATE.value, start_date.isoformat()
            )
        await self._run("set_start_date", work)

    async def clear_start_date(self) -> None:
        async def work(session: AsyncSession) -> None:
            await SettingsRepository(session).delete(SettingKey.PROGRAM_START_DATE.value)
        await self._run("clear_start_date", work)

    # Fit tests

    async def get_all_fit_tests(self) -> list[FitTestRecord]:
        async def work(session: AsyncSession) -> list[FitTestRecord]:
            rows = await FitTestRepository(session).list_all()
            return [FitTestRecord.from_model(row) for row in rows]
        return await self._run("get_all_fit_tests", work)

    async def insert_fit_test(self, record: FitTestRecord) -> int:
        async def work(session: AsyncSession) -> int:
            entity = await FitTestRepository(session).create(record)
            return entity.id
        return await self._run("insert_fit_test", work)

    async def delete_fit_test(self, fit_test_id: int) -> int:
        async def work(session: AsyncSession) -> int:
            return await FitTestRepository(session).delete(fit_test_id)
        return await self._run("delete_fit_test", work)
