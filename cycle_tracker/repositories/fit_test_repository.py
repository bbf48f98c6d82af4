from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cycle_tracker.models.fit_test import FitTestResult
from cycle_tracker.schemas.fit_test import MOVEMENT_FIELDS, FitTestRecord


class FitTestRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_all(self) -> list[FitTestResult]:
        result = await self._session.execute(
            select(FitTestResult).order_by(FitTestResult.test_date, FitTestResult.test_number)
        )
        return list(result.scalars().all())

    async def create(self, record: FitTestRecord) -> FitTestResult:
        entity = FitTestResult(
            test_date=record.test_date,
            test_number=record.test_number,
            notes=record.notes,
            **{name: getattr(record, name) for name in MOVEMENT_FIELDS},
        )
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def delete(self, fit_test_id: int) -> int:
        result = await self._session.execute(
            delete(FitTestResult).where(FitTestResult.id == fit_test_id)
        )
        return result.rowcount
