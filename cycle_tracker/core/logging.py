"""Structured logging for the engine and its tooling."""
import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

from cycle_tracker.config.settings import get_settings


def configure_logging(debug: bool | None = None, json_output: bool = True) -> None:
    """
    Configure structlog for the process.

    Args:
        debug: Log at DEBUG instead of INFO; defaults to ``settings.debug``
        json_output: Render JSON lines, or a plain key=value console format
            when False (used by the CLI)
    """
    if debug is None:
        debug = get_settings().debug
    level = logging.DEBUG if debug else logging.INFO

    # Logs go to stderr so CLI output on stdout stays readable
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind ``kwargs`` to every log entry inside the block, then restore."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
