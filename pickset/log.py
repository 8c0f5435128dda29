"""Append-only, severity-tagged log sink.

pickset modules log through loguru's shared ``logger`` and never add sinks on
import. Applications call :func:`configure_logging` once to send those
records (and their own) to a file or to stderr.
"""

import sys
from pathlib import Path

from loguru import logger

# e.g. "2014-05-19 17:30:56 [ERROR] pickset.database: No DSN configured"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} [{level}] {name}: {message}"


def configure_logging(path: str | Path | None = None, level: str = "INFO") -> int:
    """
    Add a log sink and return its id.

    Args:
        path: Log file to append to; created if missing. Writes to stderr
            when omitted.
        level: Minimum severity to record (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Sink id, for :func:`remove_sink`
    """
    if path is None:
        return logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())

    return logger.add(
        Path(path),
        format=LOG_FORMAT,
        level=level.upper(),
        mode="a",
        encoding="utf-8",
    )


def remove_sink(sink_id: int) -> None:
    """Detach a sink added by :func:`configure_logging`, closing its file."""
    logger.remove(sink_id)
