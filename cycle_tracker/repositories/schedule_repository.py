from __future__ import annotations

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from cycle_tracker.models.program_day import ProgramDay


class ScheduleRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_all(self) -> list[ProgramDay]:
        result = await self._session.execute(
            select(ProgramDay).order_by(ProgramDay.day_number)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(ProgramDay))
        return result.scalar() or 0

    async def bulk_create(self, rows: list[dict]) -> int:
        if not rows:
            return 0
        await self._session.execute(insert(ProgramDay), rows)
        return len(rows)
