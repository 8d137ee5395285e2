"""Logging setup for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = "INFO", console: Console | None = None) -> None:
    """Route the ``h2scan`` loggers through a single rich handler."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_level=False,
        markup=False,
        log_time_format=LOG_TIME_FORMAT,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("h2scan")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
