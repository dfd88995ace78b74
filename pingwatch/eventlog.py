"""Append-only per-target event log.

Each monitored target owns one text file. Lines look like::

    [2024-05-01 12:00:00.123] Entering online status

Write failures are reported on the operator log and otherwise ignored so a
full disk or a removed file never stops a monitor.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)

MSG_STARTING = "Starting ping monitor to {address} as offline status"
MSG_EXITED = "Exited {state} status, elapsed {seconds} seconds"
MSG_ENTERING = "Entering {state} status"
MSG_TERMINATED = "Ping monitor terminated"


class EventLogError(Exception):
    """Raised when an event log cannot be opened."""

    pass


def format_timestamp(moment: datetime) -> str:
    """Format a local time as ``YYYY-MM-DD HH:MM:SS.mmm``."""
    return moment.strftime("%Y-%m-%d %H:%M:%S.") + f"{moment.microsecond // 1000:03d}"


def format_line(message: str, moment: datetime | None = None) -> str:
    """Build one log line, newline included."""
    moment = moment or datetime.now()
    return f"[{format_timestamp(moment)}] {message}\n"


class EventLog:
    """A target's log file, opened in append mode for its monitor's lifetime."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        try:
            self._file: TextIO | None = open(self.path, "a", encoding="utf-8")
        except OSError as e:
            raise EventLogError(f"Unable to open log file {self.path}: {e}")

    @property
    def closed(self) -> bool:
        return self._file is None

    def write(self, message: str) -> bool:
        """Append one timestamped line.

        Returns:
            True if the line was written, False if it was lost.
        """
        if self._file is None:
            logger.error("Cannot write to %s: log is closed", self.path)
            return False
        try:
            self._file.write(format_line(message))
            self._file.flush()
            return True
        except OSError as e:
            logger.error("Failed to write to %s: %s", self.path, e)
            return False

    def close(self) -> None:
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as e:
            logger.error("Failed to close log file %s: %s", self.path, e)
        finally:
            self._file = None
