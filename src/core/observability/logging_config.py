"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    CLI flag  >  JDKI_LOG_LEVEL env var  >  WARNING (default)

Optional file output via JDKI_LOG_FILE / JDKI_LOG_FILE_LEVEL env vars.

Installation logs name the target host: pass ``extra={"host": host.name}``.
Records without one are stamped with the controller's own host name, so
verbose and file output always carry a ``%(host)s`` field.
"""

from __future__ import annotations

import logging
import socket
import sys

# WARNING and above — message only
_FMT_MINIMAL = "%(message)s"

# INFO — timestamped with host and logger name
_FMT_VERBOSE = "%(asctime)s [%(host)s] [%(name)s] %(message)s"

# DEBUG and file output — file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(host)s %(name)s:%(lineno)d — %(message)s"

_DATEFMT_SHORT = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


class HostFilter(logging.Filter):
    """Default ``record.host`` to the controller host when a record has none."""

    def __init__(self, host_name: str):
        super().__init__()
        self.host_name = host_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "host"):
            record.host = self.host_name
        return True


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    host_name: str | None = None,
) -> None:
    """Configure Python logging for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file, defaults to ``level``.
        host_name: Host stamped on records that name none (default: this machine).
    """
    numeric_level = _parse_level(level)
    host_filter = HostFilter(host_name or socket.gethostname())

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_SHORT
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_SHORT
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    console.addFilter(host_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_FILE))
        fh.addFilter(host_filter)
        root.addHandler(fh)

    root.setLevel(effective_level)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value, WARNING if unknown."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
