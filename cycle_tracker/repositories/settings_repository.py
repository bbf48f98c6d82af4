from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cycle_tracker.models.program_setting import ProgramSetting


class SettingsRepository:
    """Key/value preferences."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, key: str) -> str | None:
        result = await self._session.execute(
            select(ProgramSetting.value).where(ProgramSetting.key == key)
        )
        return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        row = await self._session.get(ProgramSetting, key)
        if row is None:
            self._session.add(ProgramSetting(key=key, value=value))
        else:
            row.value = value
        await self._session.flush()

    async def delete(self, key: str) -> bool:
        result = await self._session.execute(
            delete(ProgramSetting).where(ProgramSetting.key == key)
        )
        return result.rowcount > 0
