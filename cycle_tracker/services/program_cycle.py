"""
ProgramCycleEngine - the single entry point the presentation layer talks to.

Responsible for:
- Loading the schedule, the session log and the start date from the store
- Complete / skip / reset of a day, bulk import of historical sessions
- Setting and clearing the program start date, including the destructive
  reset and auto-completion that goes with it
- Cached read models: today's workout, cycle position, cycle stats, progress,
  this week's sessions, streak

Mutations are serialized by a single in-flight flag: a call made while another
is running returns immediately without effect. Every mutation writes, reloads
the affected collections, invalidates (or eagerly refreshes) the cache and then
notifies listeners exactly once, whether it succeeded or failed.
"""
from __future__ import annotations

import time
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from cycle_tracker.config.settings import Settings, get_settings
from cycle_tracker.core.cache import ProgressCache
from cycle_tracker.core.exceptions import ConfigurationError, DomainError, PersistenceError, ValidationError
from cycle_tracker.core.logging import get_logger, log_context
from cycle_tracker.core.metrics import engine_operations
from cycle_tracker.repositories.base import ProgramStore
from cycle_tracker.schemas.schedule import ProgramDayDefinition
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.schemas.stats import CycleStats, OverallProgress
from cycle_tracker.services.auto_completion import AutoCompletionEngine, BackfillResult
from cycle_tracker.services.progress_aggregator import ProgressAggregator
from cycle_tracker.services.schedule_calculator import (
    ScheduleCalculator,
    ScheduleTemplate,
    is_anchor_date,
    nearest_anchor_date,
    normalize_date,
    week_in_cycle_for,
)
from cycle_tracker.services.session_import import build_import_sessions, parse_relative_days

logger = get_logger(__name__)

T = TypeVar('T')
Listener = Callable[[], Any]


class ProgramCycleEngine:
    """
    Owns the in-memory program state for one user.

    Args:
        store: Program store (schedule, sessions, start date)
        settings: Engine settings; defaults to ``get_settings()``
        clock: Returns "today"; injectable for tests
        timer: Monotonic clock used for cache TTL checks
    """

    def __init__(
        self,
        store: ProgramStore,
        settings: Settings | None = None,
        clock: Callable[[], date | datetime] = date.today,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._clock = clock

        self._template = ScheduleTemplate([], self._settings.cycle_length_days)
        self._calculator = ScheduleCalculator(self._template)
        self._aggregator = ProgressAggregator(self._calculator)
        self._sessions: tuple[SessionRecord, ...] = ()
        self._by_date: dict[date, SessionRecord] = {}
        self._start_date: date | None = None

        self._cache = ProgressCache(self._settings.cache_ttl_seconds, timer)
        self._in_flight = False
        self._listeners: list[Listener] = []
        self.last_error: DomainError | None = None

    # State

    @property
    def start_date(self) -> date | None:
        return self._start_date

    @property
    def sessions(self) -> list[SessionRecord]:
        return list(self._sessions)

    @property
    def schedule(self) -> tuple[ProgramDayDefinition, ...]:
        return self._template.days

    @property
    def template(self) -> ScheduleTemplate:
        return self._template

    @property
    def calculator(self) -> ScheduleCalculator:
        return self._calculator

    @property
    def cache(self) -> ProgressCache:
        return self._cache

    @property
    def is_loading(self) -> bool:
        return self._in_flight

    def today(self) -> date:
        return normalize_date(self._clock())

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("listener_failed", listener=repr(listener))

    # Operation plumbing

    async def _run_operation(self, name: str, work: Callable[[], Awaitable[T]]) -> T | None:
        if self._in_flight:
            logger.warning("operation_ignored_in_flight", operation=name)
            return None

        self._in_flight = True
        status = "error"
        try:
            with log_context(operation=name):
                try:
                    result = await work()
                except (PersistenceError, ConfigurationError) as e:
                    self.last_error = e
                    logger.error("operation_failed", code=e.code, error=e.message, details=e.details)
                    raise
            self.last_error = None
            status = "success"
            return result
        finally:
            self._in_flight = False
            engine_operations.labels(operation=name, status=status).inc()
            self._notify()

    def _build_template(self, days: Sequence[ProgramDayDefinition]) -> ScheduleTemplate:
        template = ScheduleTemplate(days, self._settings.cycle_length_days)
        if template.is_empty:
            logger.warning("schedule_empty")
        elif not template.is_complete:
            logger.warning(
                "schedule_incomplete",
                missing_days=template.missing_days(),
                unexpected_days=template.unexpected_days(),
            )
        return template

    def _apply_template(self, template: ScheduleTemplate) -> None:
        self._template = template
        self._calculator = ScheduleCalculator(template)
        self._aggregator = ProgressAggregator(self._calculator)
        self._cache.invalidate(reason="schedule_loaded")

    def _apply_sessions(self, sessions: Sequence[SessionRecord]) -> None:
        self._sessions = tuple(sorted(sessions, key=lambda s: s.date))
        self._by_date = {s.date: s for s in self._sessions}
        self._cache.observe_sessions(self._sessions)

    async def _reload_sessions(self) -> None:
        self._apply_sessions(await self._store.get_all_sessions())

    def _after_write(self) -> None:
        if self._settings.cache_refresh_strategy == "eager":
            today = self.today()
            self._cache.refresh(self._loaders(today), today)
        else:
            self._cache.invalidate(reason="mutation")

    # Lifecycle

    async def initialize(self) -> None:
        """Load start date, schedule and sessions from the store."""
        async def work() -> None:
            # All reads complete before any state is replaced
            start_date = await self._store.get_start_date()
            days = await self._store.get_all_schedule_days()
            sessions = await self._store.get_all_sessions()
            self._apply_template(self._build_template(days))
            self._apply_sessions(sessions)
            self._start_date = start_date
            logger.info(
                "engine_initialized",
                start_date=start_date.isoformat() if start_date else None,
                schedule_days=len(self._template),
                sessions=len(self._sessions),
            )
        await self._run_operation("initialize", work)

    async def reload_sessions(self) -> bool:
        """
        Re-read the session log without writing.

        Returns:
            True if the content changed since the previous load
        """
        async def work() -> bool:
            before = self._cache.fingerprint
            await self._reload_sessions()
            return self._cache.fingerprint != before
        changed = await self._run_operation("reload_sessions", work)
        return bool(changed)

    # Day logging

    def _resolve_scheduled_day_id(self, on_date: date) -> int | None:
        if self._start_date is None:
            return None
        return self._calculator.cycle_day_for(self._start_date, on_date)

    async def _log_day(
        self,
        name: str,
        completed: bool,
        notes: str | None,
        on_date: date | datetime | None,
        scheduled_day_id: int | None,
    ) -> SessionRecord | None:
        log_date = normalize_date(on_date) if on_date is not None else self.today()
        if scheduled_day_id is None:
            scheduled_day_id = self._resolve_scheduled_day_id(log_date)

        async def work() -> SessionRecord | None:
            existing = await self._store.get_session_by_date(log_date)
            if existing is not None:
                await self._store.update_session(
                    existing.model_copy(update={
                        "completed": completed,
                        "notes": notes,
                        "scheduled_day_id": scheduled_day_id,
                    })
                )
            else:
                await self._store.insert_session(
                    SessionRecord(
                        date=log_date,
                        completed=completed,
                        notes=notes,
                        scheduled_day_id=scheduled_day_id,
                    )
                )
            await self._reload_sessions()
            self._after_write()
            logger.info("day_logged", date=log_date.isoformat(), completed=completed)
            return self._by_date.get(log_date)

        return await self._run_operation(name, work)

    async def complete_workout(
        self,
        notes: str | None = None,
        on_date: date | datetime | None = None,
        scheduled_day_id: int | None = None,
    ) -> SessionRecord | None:
        """Mark a day (today by default) completed, updating any existing record."""
        return await self._log_day("complete_workout", True, notes, on_date, scheduled_day_id)

    async def skip_workout(
        self,
        reason: str | None = None,
        on_date: date | datetime | None = None,
        scheduled_day_id: int | None = None,
    ) -> SessionRecord | None:
        """Mark a day (today by default) skipped, updating any existing record."""
        return await self._log_day("skip_workout", False, reason, on_date, scheduled_day_id)

    async def reset_workout(self, on_date: date | datetime | None = None) -> bool | None:
        """Remove the record for a day so it counts as not yet acted on."""
        log_date = normalize_date(on_date) if on_date is not None else self.today()

        async def work() -> bool:
            deleted = await self._store.delete_session_by_date(log_date)
            await self._reload_sessions()
            self._after_write()
            logger.info("day_reset", date=log_date.isoformat(), deleted=deleted)
            return deleted > 0

        return await self._run_operation("reset_workout", work)

    async def bulk_upsert_sessions(self, records: Sequence[SessionRecord]) -> int | None:
        """Insert or update records by date; one record per date is kept."""
        if not records:
            return 0
        latest: dict[date, SessionRecord] = {}
        for record in records:
            latest[record.date] = record

        async def work() -> int:
            count = await self._store.upsert_sessions(list(latest.values()))
            await self._reload_sessions()
            self._after_write()
            logger.info("sessions_upserted", count=count)
            return count

        return await self._run_operation("bulk_upsert_sessions", work)

    async def import_sessions(
        self,
        start_date: date | datetime,
        end_date: date | datetime,
        relative_days: str | list[int] | None = None,
        all_completed: bool = True,
        notes: str | None = None,
    ) -> int | None:
        """Import a historical date range; see ``build_import_sessions``."""
        if isinstance(relative_days, str) or relative_days is None:
            relative_days = parse_relative_days(relative_days)
        records = build_import_sessions(
            self._template,
            start_date,
            end_date,
            relative_days=relative_days,
            all_completed=all_completed,
            notes=notes,
        )
        return await self.bulk_upsert_sessions(records)

    # Start date

    def _require_reset_confirmation(self, confirm_reset: bool) -> None:
        if confirm_reset:
            return
        if self._start_date is not None or self._sessions:
            raise ValidationError(
                "confirm_reset",
                "Changing or clearing the start date erases every logged session; "
                "pass confirm_reset=True to proceed",
                details={"field": "confirm_reset", "sessions": len(self._sessions)},
            )

    async def set_start_date(
        self,
        start_date: date | datetime,
        *,
        confirm_reset: bool = False,
        auto_complete: bool = True,
    ) -> BackfillResult | None:
        """
        Start (or restart) the program on ``start_date``.

        All existing sessions are deleted, the new date is stored and, with
        ``auto_complete``, every elapsed non-rest day before today is logged as
        completed.

        Raises:
            ValidationError: If the date is not on the anchor weekday, or
                existing progress would be erased without ``confirm_reset``
            ConfigurationError: If auto-completion is requested with an empty
                or incomplete schedule; nothing is written in that case
            PersistenceError: If a store call fails
        """
        start_date = normalize_date(start_date)
        if not is_anchor_date(start_date, self._settings.anchor_weekday):
            raise ValidationError(
                "start_date",
                f"{start_date.isoformat()} is not on the program anchor weekday",
                details={
                    "field": "start_date",
                    "anchor_weekday": self._settings.anchor_weekday,
                    "suggested": nearest_anchor_date(
                        start_date, self._settings.anchor_weekday, allow_future=False
                    ).isoformat(),
                },
            )
        self._require_reset_confirmation(confirm_reset)

        async def work() -> BackfillResult:
            if auto_complete:
                template = self._template
                if template.is_empty:
                    template = self._build_template(await self._store.get_all_schedule_days())
                template.validate()
                if template is not self._template:
                    self._apply_template(template)

            await self._store.delete_all_sessions()
            await self._store.set_start_date(start_date)
            logger.info("start_date_set", start_date=start_date.isoformat())

            result = BackfillResult()
            if auto_complete:
                backfill = AutoCompletionEngine(
                    self._store,
                    self._calculator,
                    batch_size=self._settings.backfill_batch_size,
                    note=self._settings.auto_complete_note,
                )
                result = await backfill.run(start_date, self.today())

            await self._reload_sessions()
            self._start_date = start_date
            self._after_write()
            return result

        return await self._run_operation("set_start_date", work)

    async def clear_start_date(self, *, confirm_reset: bool = False) -> None:
        """Forget the start date and delete every logged session."""
        self._require_reset_confirmation(confirm_reset)

        async def work() -> None:
            await self._store.delete_all_sessions()
            await self._store.clear_start_date()
            await self._reload_sessions()
            self._start_date = None
            self._after_write()
            logger.info("start_date_cleared")

        await self._run_operation("clear_start_date", work)

    def nearest_anchor_date(self, value: date | datetime, allow_future: bool = True) -> date:
        return nearest_anchor_date(value, self._settings.anchor_weekday, allow_future)

    # Queries

    def _compute_cycle_position(self, today: date) -> tuple[int | None, int | None, int | None]:
        if self._start_date is None:
            return (None, None, None)
        day = self._calculator.cycle_day_for(self._start_date, today)
        if day is None:
            return (None, None, None)
        return (
            day,
            week_in_cycle_for(day),
            self._calculator.cycle_number_for(self._start_date, today),
        )

    def _loaders(self, today: date) -> dict[str, Callable[[], Any]]:
        return {
            "cycle_position": lambda: self._compute_cycle_position(today),
            "cycle_stats": lambda: self._aggregator.current_cycle_stats(
                self._sessions, self._start_date, today
            ),
            "overall_progress": lambda: self._aggregator.overall_progress(
                self._sessions, self._start_date, today
            ),
            "this_week_sessions": lambda: tuple(
                self._aggregator.this_week_sessions(self._sessions, self._start_date, today)
            ),
            "current_streak": lambda: self._aggregator.current_streak(self._sessions),
        }

    def _cached(self, name: str) -> Any:
        today = self.today()
        loaders = self._loaders(today)
        return self._cache.get_or_compute(name, loaders[name], today)

    def current_day_in_cycle(self) -> int | None:
        return self._cached("cycle_position")[0]

    def current_week_in_cycle(self) -> int | None:
        return self._cached("cycle_position")[1]

    def current_cycle_number(self) -> int | None:
        return self._cached("cycle_position")[2]

    def todays_workout(self) -> ProgramDayDefinition | None:
        day = self.current_day_in_cycle()
        if day is None:
            return None
        return self._template.get(day)

    def week_workouts(self, week_in_cycle: int) -> list[ProgramDayDefinition]:
        weeks = self._calculator.weeks_in_cycle
        if not 1 <= week_in_cycle <= weeks:
            raise ValidationError(
                "week_in_cycle",
                f"Week must be between 1 and {weeks}, got {week_in_cycle}",
            )
        return self._template.week(week_in_cycle)

    def session_for_date(self, on_date: date | datetime) -> SessionRecord | None:
        return self._by_date.get(normalize_date(on_date))

    def current_cycle_stats(self) -> CycleStats:
        return self._cached("cycle_stats")

    def overall_progress(self) -> OverallProgress:
        return self._cached("overall_progress")

    def this_week_sessions(self) -> list[SessionRecord]:
        return list(self._cached("this_week_sessions"))

    def current_streak(self) -> int:
        return self._cached("current_streak")
