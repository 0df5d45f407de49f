"""Logging setup for CLI runs."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def configure_logging(level: str = "INFO") -> None:
    """Route the ``mc_status`` loggers through a rich console handler."""
    name = level.upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}")

    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root = logging.getLogger("mc_status")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(name)
    root.propagate = False
