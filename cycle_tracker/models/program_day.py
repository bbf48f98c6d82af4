from sqlalchemy import CheckConstraint, Column, Integer, String

from cycle_tracker.db.database import Base
from cycle_tracker.models.enums import DayCategory

CATEGORY_VALUES = ", ".join(f"'{c.value}'" for c in DayCategory)


class ProgramDay(Base):
    """One day of the repeating program template."""

    __tablename__ = "program_days"

    id = Column(Integer, primary_key=True, autoincrement=True)
    day_number = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    category = Column(String(20), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("day_number >= 1", name="check_program_day_number_positive"),
        CheckConstraint(
            f"category IN ({CATEGORY_VALUES})",
            name="check_program_day_category_valid",
        ),
        CheckConstraint("duration_minutes >= 0", name="check_program_day_duration_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<ProgramDay(day_number={self.day_number}, name='{self.name}', category='{self.category}')>"
