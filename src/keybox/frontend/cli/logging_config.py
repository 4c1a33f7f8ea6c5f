"""Logging setup shared by the console and the TUI."""

import logging
import os
import sys

LOG_LEVEL_ENV = "KEYBOX_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def resolve_level(default: int) -> int:
    """Level named by ``KEYBOX_LOG_LEVEL`` (e.g. ``debug``), else ``default``."""
    name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.WARNING, stream=None) -> None:
    # stderr, so exported data on stdout stays clean
    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=stream or sys.stderr,
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)
