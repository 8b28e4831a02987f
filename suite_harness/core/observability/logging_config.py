"""
Logging configuration — one root setup shared by every module logger.

The CLI calls ``configure_from_env`` once; library code only ever does
``logger = logging.getLogger(__name__)``.

Console level, highest precedence first:
    --debug / -v / -q  >  SUITE_HARNESS_LOG_LEVEL  >  WARNING

A second, independently levelled sink can be added with
SUITE_HARNESS_LOG_FILE (and SUITE_HARNESS_LOG_FILE_LEVEL).
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "SUITE_HARNESS_LOG_LEVEL"
LOG_FILE_ENV = "SUITE_HARNESS_LOG_FILE"
LOG_FILE_LEVEL_ENV = "SUITE_HARNESS_LOG_FILE_LEVEL"

# (max level, format, datefmt), checked in order
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = "%(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_DEFAULT)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with a stderr sink and optional file sink.

    Args:
        level: Console level name.
        log_file: Path of an extra log file, if any.
        log_file_level: Level of the file sink (default: ``level``).
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    handlers.append(console)

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(file_level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        handlers.append(sink)

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # The root must let through whatever the most verbose sink wants.
    root.setLevel(min(h.level for h in handlers))


def configure_from_env(cli_level: str | None = None) -> None:
    """Set up logging from a CLI-chosen level and the SUITE_HARNESS_* variables."""
    setup_logging(
        level=cli_level or os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown names mean WARNING."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
