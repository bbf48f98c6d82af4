"""
CLI tool for driving the program cycle engine against the local database.

Usage examples:
    # Create tables and seed the default 63-day schedule
    python -m scripts.tools.program_cli init

    # Show today's workout and progress
    python -m scripts.tools.program_cli status

    # Start the program on a Monday, erasing existing progress
    python -m scripts.tools.program_cli set-start 2024-01-01 --yes

    # Log today
    python -m scripts.tools.program_cli complete --notes "Felt strong"
    python -m scripts.tools.program_cli skip --notes "Travel"

    # Import history, marking positions 3 and 5 as skipped
    python -m scripts.tools.program_cli import \\
        --start 2023-10-02 --end 2023-12-03 --skipped-days "3,5"
"""
import argparse
import asyncio
import sys
from datetime import date

from cycle_tracker.config.settings import get_settings
from cycle_tracker.core.exceptions import DomainError
from cycle_tracker.core.logging import configure_logging
from cycle_tracker.db.database import close_engine, create_engine, create_session_maker, init_db
from cycle_tracker.repositories.store import SqlProgramStore
from cycle_tracker.schemas.fit_test import MOVEMENT_FIELDS, FitTestRecord
from cycle_tracker.schemas.session import SessionRecord
from cycle_tracker.services.fit_tests import FitTestTracker
from cycle_tracker.services.program_cycle import ProgramCycleEngine


class ProgramContext:
    """Opens the database, seeds the schedule and loads an engine."""

    def __init__(self):
        self.settings = get_settings()
        self.db_engine = None
        self.store = None
        self.engine = None

    async def __aenter__(self) -> "ProgramContext":
        self.db_engine = create_engine(self.settings.database_url)
        await init_db(self.db_engine)
        self.store = SqlProgramStore(create_session_maker(self.db_engine))
        await self.store.seed_schedule()
        self.engine = ProgramCycleEngine(self.store, self.settings)
        await self.engine.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await close_engine(self.db_engine)


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def print_session(record: SessionRecord) -> None:
    status = "done" if record.completed else "skipped"
    print(f"  {record.date.isoformat()}  {status:<8} {record.notes or ''}")


async def init_command(args):
    """Handle init command."""
    async with ProgramContext() as ctx:
        print(f"\n✅ Database ready: {ctx.settings.database_url}")
        print(f"   Schedule days: {len(ctx.engine.schedule)}")


async def status_command(args):
    """Handle status command."""
    async with ProgramContext() as ctx:
        engine = ctx.engine
        if engine.start_date is None:
            print("\nNo start date set. Use 'set-start YYYY-MM-DD'.")
            suggested = engine.nearest_anchor_date(engine.today())
            print(f"   Next valid start date: {suggested.isoformat()}")
            return

        workout = engine.todays_workout()
        stats = engine.current_cycle_stats()
        progress = engine.overall_progress()

        print("\n=== Program Status ===")
        print(f"Start date: {engine.start_date.isoformat()}")
        day = engine.current_day_in_cycle()
        if day is None:
            print("Program has not started yet.")
        else:
            print(
                f"Cycle {engine.current_cycle_number()}, "
                f"week {engine.current_week_in_cycle()}, day {day}"
            )
        if workout is not None:
            print(f"Today: {workout.name} ({workout.category.value}, "
                  f"{workout.reference_duration_minutes} min)")
        print(f"Completed: {stats.completed}  Skipped: {stats.skipped}  "
              f"Remaining: {stats.remaining}  of {stats.total_in_cycle}")
        print(f"Cycle progress: {progress.current_cycle_progress:.1f}%  "
              f"Cycles completed: {progress.completed_cycles}")
        print(f"Current streak: {engine.current_streak()}")

        week = engine.this_week_sessions()
        if week:
            print("\nThis week:")
            for record in week:
                print_session(record)


async def set_start_command(args):
    """Handle set-start command."""
    async with ProgramContext() as ctx:
        result = await ctx.engine.set_start_date(
            args.date,
            confirm_reset=args.yes,
            auto_complete=not args.no_backfill,
        )
        print(f"\n✅ Program starts {args.date.isoformat()}")
        if result is not None and result.days_visited:
            print(f"   Auto-completed: {result.inserted}")
            print(f"   Rest days skipped: {result.skipped_rest}")


async def clear_start_command(args):
    """Handle clear-start command."""
    async with ProgramContext() as ctx:
        await ctx.engine.clear_start_date(confirm_reset=args.yes)
        print("\n✅ Start date and session history cleared")


async def complete_command(args):
    """Handle complete command."""
    async with ProgramContext() as ctx:
        record = await ctx.engine.complete_workout(notes=args.notes, on_date=args.date)
        print(f"\n✅ Completed {record.date.isoformat()}")


async def skip_command(args):
    """Handle skip command."""
    async with ProgramContext() as ctx:
        record = await ctx.engine.skip_workout(reason=args.notes, on_date=args.date)
        print(f"\n⏭️  Skipped {record.date.isoformat()}")


async def reset_command(args):
    """Handle reset command."""
    async with ProgramContext() as ctx:
        deleted = await ctx.engine.reset_workout(on_date=args.date)
        if deleted:
            print("\n✅ Day reset")
        else:
            print("\nNothing logged for that day.")


async def import_command(args):
    """Handle import command."""
    async with ProgramContext() as ctx:
        count = await ctx.engine.import_sessions(
            args.start,
            args.end,
            relative_days=args.skipped_days,
            all_completed=not args.completed_only,
            notes=args.notes,
        )
        print("\n=== Import Results ===")
        print(f"Sessions written: {count}")


async def fit_test_command(args):
    """Handle fit-test command."""
    async with ProgramContext() as ctx:
        tracker = FitTestTracker(ctx.store, ctx.settings.fit_test_interval_days)
        await tracker.load()

        if args.reps:
            if len(args.reps) != len(MOVEMENT_FIELDS):
                print(f"\n❌ Expected {len(MOVEMENT_FIELDS)} rep counts: {', '.join(MOVEMENT_FIELDS)}")
                sys.exit(1)
            record = FitTestRecord(
                test_date=args.date or ctx.engine.today(),
                notes=args.notes,
                **dict(zip(MOVEMENT_FIELDS, args.reps)),
            )
            await tracker.save(record)
            print(f"\n✅ Fit test #{tracker.latest().test_number} saved")

        print(f"\n=== Fit Tests ({len(tracker.results)}) ===")
        for result in tracker.results:
            print(f"  #{result.test_number}  {result.test_date.isoformat()}  total reps: {result.total_reps}")

        improvements = tracker.improvement_percentages()
        if improvements:
            print("\nImprovement since first test:")
            for name, percent in improvements.items():
                print(f"  {name:<18} {percent:+.1f}%")

        if ctx.engine.start_date is not None:
            due = tracker.is_next_test_due(ctx.engine.start_date, ctx.engine.today())
            print(f"\nNext test due: {'yes' if due else 'no'}")


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Program Cycle CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scripts.tools.program_cli init
  python -m scripts.tools.program_cli status
  python -m scripts.tools.program_cli set-start 2024-01-01 --yes
  python -m scripts.tools.program_cli complete --date 2024-01-03
  python -m scripts.tools.program_cli import --start 2023-10-02 --end 2023-12-03
  python -m scripts.tools.program_cli fit-test --reps 40 38 45 30 12 14 20 50
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "init",
        help="Create tables and seed the default schedule"
    ).set_defaults(func=init_command)

    subparsers.add_parser(
        "status",
        help="Show today's workout and progress"
    ).set_defaults(func=status_command)

    # set-start command
    set_start_parser = subparsers.add_parser(
        "set-start",
        help="Set the program start date (must be on the anchor weekday)"
    )
    set_start_parser.add_argument("date", type=parse_date, help="Start date, YYYY-MM-DD")
    set_start_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Confirm that existing sessions will be erased"
    )
    set_start_parser.add_argument(
        "--no-backfill",
        action="store_true",
        help="Do not auto-complete elapsed days"
    )
    set_start_parser.set_defaults(func=set_start_command)

    # clear-start command
    clear_parser = subparsers.add_parser(
        "clear-start",
        help="Clear the start date and all sessions"
    )
    clear_parser.add_argument("--yes", "-y", action="store_true", help="Confirm erasing sessions")
    clear_parser.set_defaults(func=clear_start_command)

    # complete / skip / reset commands
    for name, func, help_text in (
        ("complete", complete_command, "Mark a day completed"),
        ("skip", skip_command, "Mark a day skipped"),
        ("reset", reset_command, "Remove the record for a day"),
    ):
        day_parser = subparsers.add_parser(name, help=help_text)
        day_parser.add_argument("--date", "-d", type=parse_date, help="Day to log (default: today)")
        if name != "reset":
            day_parser.add_argument("--notes", "-n", help="Optional notes")
        day_parser.set_defaults(func=func)

    # import command
    import_parser = subparsers.add_parser(
        "import",
        help="Import historical sessions for a date range"
    )
    import_parser.add_argument("--start", required=True, type=parse_date, help="First date")
    import_parser.add_argument("--end", required=True, type=parse_date, help="Last date")
    import_parser.add_argument(
        "--skipped-days",
        default="",
        help="Comma-separated 1-based positions in the range to flip"
    )
    import_parser.add_argument(
        "--completed-only",
        action="store_true",
        help="Import workouts as skipped except the listed positions"
    )
    import_parser.add_argument("--notes", "-n", help="Notes for every imported session")
    import_parser.set_defaults(func=import_command)

    # fit-test command
    fit_test_parser = subparsers.add_parser(
        "fit-test",
        help="Show fit test history, optionally recording a new result"
    )
    fit_test_parser.add_argument(
        "--reps", "-r",
        type=int,
        nargs="+",
        help="Rep counts in movement order: " + ", ".join(MOVEMENT_FIELDS)
    )
    fit_test_parser.add_argument("--date", "-d", type=parse_date, help="Test date (default: today)")
    fit_test_parser.add_argument("--notes", "-n", help="Optional notes")
    fit_test_parser.set_defaults(func=fit_test_command)

    return parser


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(json_output=False)
    try:
        asyncio.run(args.func(args))
    except DomainError as e:
        print(f"\n❌ {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
