import datetime as dt

from pydantic import BaseModel, ConfigDict


class SessionRecord(BaseModel):
    """A dated log entry. ``id`` is absent until the store assigns one."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    completed: bool = False
    scheduled_day_id: int | None = None
    notes: str | None = None
    id: int | None = None

    @classmethod
    def from_model(cls, row) -> "SessionRecord":
        return cls(
            id=row.id,
            scheduled_day_id=row.scheduled_day_id,
            date=row.date,
            completed=bool(row.completed),
            notes=row.notes,
        )
