from pydantic import BaseModel, ConfigDict, Field


class CycleStats(BaseModel):
    """Countable-day tallies for the cycle containing today."""
    model_config = ConfigDict(frozen=True)

    completed: int = 0
    skipped: int = 0
    remaining: int = 0
    total_in_cycle: int = 0


class OverallProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_cycle_progress: float = Field(default=0.0, ge=0.0, le=100.0)
    completed_cycles: int = 0
