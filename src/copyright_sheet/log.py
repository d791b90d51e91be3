"""Logging setup for the CLI and the HTTP server."""
from __future__ import annotations

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ERROR = "error"
LOG_LEVEL_INFO = "info"
LOG_LEVEL_DEBUG = "debug"

_LEVELS = {
    LOG_LEVEL_ERROR: logging.ERROR,
    LOG_LEVEL_INFO: logging.INFO,
    LOG_LEVEL_DEBUG: logging.DEBUG,
}


def resolve_level(level_name: Optional[str]) -> int:
    """Map "Error", "Info" or "Debug" (any case) to a logging level; ERROR otherwise."""
    return _LEVELS.get((level_name or "").strip().lower(), logging.ERROR)


def configure_logging(level_name: Optional[str] = None, console: Optional[Console] = None) -> int:
    """
    Route the package's log records through rich.

    Args:
        level_name: Level name; defaults to the LOG_LEVEL environment variable
        console: Console to log to (stderr by default)

    Returns:
        The numeric level that was applied
    """
    level = resolve_level(level_name if level_name is not None else os.getenv("LOG_LEVEL"))
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    return level
