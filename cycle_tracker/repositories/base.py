"""Store contracts the engine depends on.

Anything that satisfies these protocols can back the engine: the SQLAlchemy
store in ``store.py`` or an in-memory fake in tests.
"""
from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence, runtime_checkable

from cycle_tracker.schemas.fit_test import FitTestRecord
from cycle_tracker.schemas.schedule import ProgramDayDefinition
from cycle_tracker.schemas.session import SessionRecord


@runtime_checkable
class ProgramStore(Protocol):
    """Persistence for the schedule, the session log and the start date.

    Every method may raise ``PersistenceError``.
    """

    async def get_all_schedule_days(self) -> list[ProgramDayDefinition]: ...

    async def get_session_by_date(self, on_date: date) -> SessionRecord | None: ...

    async def get_all_sessions(self) -> list[SessionRecord]: ...

    async def insert_session(self, record: SessionRecord) -> int: ...

    async def insert_sessions(self, records: Sequence[SessionRecord]) -> list[int]: ...

    async def update_session(self, record: SessionRecord) -> int: ...

    async def upsert_sessions(self, records: Sequence[SessionRecord]) -> int: ...

    async def delete_session_by_date(self, on_date: date) -> int: ...

    async def delete_all_sessions(self) -> None: ...

    async def get_start_date(self) -> date | None: ...

    async def set_start_date(self, start_date: date) -> None: ...

    async def clear_start_date(self) -> None: ...


@runtime_checkable
class FitTestStore(Protocol):
    async def get_all_fit_tests(self) -> list[FitTestRecord]: ...

    async def insert_fit_test(self, record: FitTestRecord) -> int: ...

    async def delete_fit_test(self, fit_test_id: int) -> int: ...
