from __future__ import annotations

from datetime import date

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cycle_tracker.models.workout_session import WorkoutSession
from cycle_tracker.schemas.session import SessionRecord


class SessionRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_date(self, on_date: date) -> WorkoutSession | None:
        result = await self._session.execute(
            select(WorkoutSession).where(WorkoutSession.date == on_date)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[WorkoutSession]:
        result = await self._session.execute(
            select(WorkoutSession).order_by(WorkoutSession.date)
        )
        return list(result.scalars().all())

    async def create(self, record: SessionRecord) -> WorkoutSession:
        entity = WorkoutSession(
            scheduled_day_id=record.scheduled_day_id,
            date=record.date,
            completed=record.completed,
            notes=record.notes,
        )
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def create_many(self, records: list[SessionRecord]) -> list[WorkoutSession]:
        entities = [
            WorkoutSession(
                scheduled_day_id=record.scheduled_day_id,
                date=record.date,
                completed=record.completed,
                notes=record.notes,
            )
            for record in records
        ]
        self._session.add_all(entities)
        await self._session.flush()
        return entities

    async def update(self, record: SessionRecord) -> int:
        result = await self._session.execute(
            update(WorkoutSession)
            .where(WorkoutSession.id == record.id)
            .values(
                scheduled_day_id=record.scheduled_day_id,
                date=record.date,
                completed=record.completed,
                notes=record.notes,
            )
        )
        return result.rowcount

    async def upsert(self, record: SessionRecord) -> WorkoutSession:
        """Update the row for ``record.date`` if there is one, else insert."""
        existing = await self.get_by_date(record.date)
        if existing is None:
            return await self.create(record)
        existing.scheduled_day_id = record.scheduled_day_id
        existing.completed = record.completed
        existing.notes = record.notes
        await self._session.flush()
        return existing

    async def delete_by_date(self, on_date: date) -> int:
        result = await self._session.execute(
            delete(WorkoutSession).where(WorkoutSession.date == on_date)
        )
        return result.rowcount

    async def delete_all(self) -> int:
        result = await self._session.execute(delete(WorkoutSession))
        return result.rowcount
