from pydantic import BaseModel, ConfigDict, Field, computed_field

from cycle_tracker.models.enums import DayCategory

DAYS_PER_WEEK = 7


def week_in_cycle_for(day_in_cycle: int) -> int:
    """Week of the cycle (1-based) that a day-in-cycle falls in."""
    return (day_in_cycle - 1) // DAYS_PER_WEEK + 1


class ProgramDayDefinition(BaseModel):
    """Immutable definition of one day of the program template."""
    model_config = ConfigDict(frozen=True)

    day_in_cycle: int = Field(ge=1)
    category: DayCategory
    name: str = ""
    reference_duration_minutes: int = Field(default=0, ge=0)

    @computed_field
    @property
    def week_in_cycle(self) -> int:
        return week_in_cycle_for(self.day_in_cycle)

    @property
    def is_countable(self) -> bool:
        return self.category.is_countable

    @classmethod
    def from_model(cls, row) -> "ProgramDayDefinition":
        return cls(
            day_in_cycle=row.day_number,
            category=DayCategory(row.category),
            name=row.name,
            reference_duration_minutes=row.duration_minutes or 0,
        )
