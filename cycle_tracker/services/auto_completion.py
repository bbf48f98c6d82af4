"""
Backfill of session records for program days that elapsed before the user
started logging.

Days are visited strictly in date order from the start date up to, but not
including, today. Rest days are never logged and existing records are never
overwritten. Synthesized records are written in bounded batches and the loop
yields to the event loop between batches.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date, timedelta

from cycle_tracker.core.exceptions import PersistenceError
from cycle_tracker.core.logging import get_logger
from cycle_tracker.core.metrics import backfill_sessions
from cycle_tracker.models.enums import DayCategory
from cycle_tracker.repositories.base import ProgramStore
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.services.schedule_calculator import ScheduleCalculator, normalize_date

logger = get_logger(__name__)


@dataclass
class BackfillResult:
    """Tally of one auto-completion run."""
    inserted: int = 0
    skipped_rest: int = 0
    skipped_existing: int = 0
    batches: int = 0

    @property
    def days_visited(self) -> int:
        return self.inserted + self.skipped_rest + self.skipped_existing


class AutoCompletionEngine:
    """
    Synthesizes completed sessions for elapsed, non-rest program days.

    Args:
        store: Program store receiving the batch inserts
        calculator: Calculator bound to the loaded schedule template
        batch_size: Maximum records per insert call
        note: Marker note written on every synthesized record
    """

    def __init__(
        self,
        store: ProgramStore,
        calculator: ScheduleCalculator,
        batch_size: int = 50,
        note: str = "Auto-completed",
    ):
        self._store = store
        self._calculator = calculator
        self.batch_size = max(1, batch_size)
        self.note = note

    async def run(self, start_date: date, today: date) -> BackfillResult:
        """
        Backfill every day in ``[start_date, today)``.

        Raises:
            ConfigurationError: If the schedule is empty or incomplete; nothing
                is written in that case
            PersistenceError: If a batch insert fails; earlier batches stay
                committed and the remaining days are not processed
        """
        self._calculator.template.validate()

        start_date = normalize_date(start_date)
        today = normalize_date(today)
        result = BackfillResult()
        if start_date >= today:
            return result

        existing_dates = {s.date for s in await self._store.get_all_sessions()}
        pending: list[SessionRecord] = []
        total_days = (today - start_date).days

        for offset in range(total_days):
            on_date = start_date + timedelta(days=offset)
            scheduled = self._calculator.scheduled_day_for(offset % self._calculator.cycle_length + 1)

            if scheduled.category is DayCategory.REST:
                result.skipped_rest += 1
                backfill_sessions.labels(outcome="skipped_rest").inc()
                continue

            if on_date in existing_dates:
                result.skipped_existing += 1
                backfill_sessions.labels(outcome="skipped_existing").inc()
                continue

            pending.append(
                SessionRecord(
                    date=on_date,
                    completed=True,
                    scheduled_day_id=scheduled.day_in_cycle,
                    notes=self.note,
                )
            )
            existing_dates.add(on_date)

            if len(pending) >= self.batch_size:
                await self._flush(pending, result)
                pending = []

        if pending:
            await self._flush(pending, result)

        logger.info(
            "backfill_complete",
            start_date=start_date.isoformat(),
            today=today.isoformat(),
            inserted=result.inserted,
            skipped_rest=result.skipped_rest,
            skipped_existing=result.skipped_existing,
            batches=result.batches,
        )
        return result

    async def _flush(self, batch: list[SessionRecord], result: BackfillResult) -> None:
        try:
            await self._store.insert_sessions(batch)
        except PersistenceError as e:
            logger.error(
                "backfill_batch_failed",
                batch_start=batch[0].date.isoformat(),
                batch_size=len(batch),
                inserted_before_failure=result.inserted,
            )
            raise PersistenceError(
                "auto_complete",
                f"Auto-completion stopped at {batch[0].date.isoformat()}: {e.message}",
                details={
                    "inserted_before_failure": result.inserted,
                    "failed_batch_start": batch[0].date.isoformat(),
                    "failed_batch_size": len(batch),
                },
            ) from e

        result.inserted += len(batch)
        result.batches += 1
        backfill_sessions.labels(outcome="inserted").inc(len(batch))
        # Let the host loop run between batches
        await asyncio.sleep(0)
