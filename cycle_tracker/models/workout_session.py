from sqlalchemy import Boolean, Column, Date, Integer, Text

from cycle_tracker.db.database import Base


class WorkoutSession(Base):
    """A logged day: completed or skipped, keyed by calendar date."""

    __tablename__ = "workout_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Day-in-cycle logged against; informational, aggregation resolves by date
    scheduled_day_id = Column(Integer, nullable=True)
    date = Column(Date, nullable=False, unique=True, index=True)
    completed = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<WorkoutSession(id={self.id}, date={self.date}, "
            f"completed={self.completed}, scheduled_day_id={self.scheduled_day_id})>"
        )
