"""Tests for the program CLI: argument parsing and commands on a temporary database."""
from datetime import date, timedelta

import pytest

from cycle_tracker.config.settings import get_settings
from scripts.tools import program_cli
from scripts.tools.program_cli import create_parser


def last_monday_before(today: date) -> date:
    """A Monday between 7 and 13 days before ``today``."""
    return today - timedelta(days=today.weekday() + 7)


@pytest.fixture
def cli_database(tmp_path, monkeypatch):
    """Point the cached settings at a fresh SQLite file for one test."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


async def run(argv):
    args = create_parser().parse_args(argv)
    await args.func(args)


class TestParser:
    def test_set_start_flags(self):
        args = create_parser().parse_args(["set-start", "2024-01-01", "--yes", "--no-backfill"])

        assert args.date == date(2024, 1, 1)
        assert args.yes is True
        assert args.no_backfill is True
        assert args.func is program_cli.set_start_command

    def test_day_commands_default_to_today(self):
        args = create_parser().parse_args(["skip", "--notes", "Travel"])

        assert args.date is None
        assert args.notes == "Travel"

    def test_reset_has_no_notes(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["reset", "--notes", "x"])

    def test_invalid_date_is_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["complete", "--date", "2024-13-01"])

    def test_import_arguments(self):
        args = create_parser().parse_args([
            "import", "--start", "2023-10-02", "--end", "2023-12-03",
            "--skipped-days", "3,5", "--completed-only",
        ])

        assert args.start == date(2023, 10, 2)
        assert args.end == date(2023, 12, 3)
        assert args.skipped_days == "3,5"
        assert args.completed_only is True

    def test_fit_test_reps_are_integers(self):
        args = create_parser().parse_args(["fit-test", "--reps", "40", "38", "45"])

        assert args.reps == [40, 38, 45]


class TestCommands:
    @pytest.mark.asyncio
    async def test_init_seeds_schedule(self, cli_database, capsys):
        await run(["init"])

        assert "Schedule days: 63" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_status_without_start_date(self, cli_database, capsys):
        await run(["status"])

        out = capsys.readouterr().out
        assert "No start date set" in out
        assert "Next valid start date" in out

    @pytest.mark.asyncio
    async def test_start_complete_and_status(self, cli_database, capsys):
        start = last_monday_before(date.today())

        await run(["set-start", start.isoformat(), "--yes"])
        await run(["complete", "--notes", "Felt strong"])
        await run(["status"])

        out = capsys.readouterr().out
        assert f"Program starts {start.isoformat()}" in out
        assert f"Completed {date.today().isoformat()}" in out
        assert "Cycle 1, week 2" in out
        assert "Felt strong" in out

    @pytest.mark.asyncio
    async def test_reset_of_unlogged_day(self, cli_database, capsys):
        await run(["reset", "--date", "2024-01-02"])

        assert "Nothing logged for that day." in capsys.readouterr().out


class TestMain:
    @pytest.fixture(autouse=True)
    def keep_logging_config(self, monkeypatch):
        monkeypatch.setattr(program_cli, "configure_logging", lambda **kwargs: None)

    def test_domain_error_exits_with_message(self, cli_database, monkeypatch, capsys):
        # 2024-01-03 is a Wednesday
        monkeypatch.setattr("sys.argv", ["program-cli", "set-start", "2024-01-03", "--yes"])

        with pytest.raises(SystemExit) as exc_info:
            program_cli.main()

        assert exc_info.value.code == 1
        assert "not on the program anchor weekday" in capsys.readouterr().out

    def test_no_command_prints_help(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["program-cli"])

        with pytest.raises(SystemExit):
            program_cli.main()

        assert "Available commands" in capsys.readouterr().out
