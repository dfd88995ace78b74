"""Tests for the event log module."""

import logging
import re
from datetime import datetime
from pathlib import Path

import pytest

from pingwatch.eventlog import EventLog, EventLogError, format_line, format_timestamp

LINE_PATTERN = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}\] (.*)$")


class TestFormatting:
    """Tests for timestamp and line formatting."""

    def test_timestamp_has_millisecond_precision(self) -> None:
        moment = datetime(2024, 5, 1, 9, 8, 7, 123456)
        assert format_timestamp(moment) == "2024-05-01 09:08:07.123"

    def test_timestamp_pads_milliseconds(self) -> None:
        moment = datetime(2024, 5, 1, 9, 8, 7, 4000)
        assert format_timestamp(moment) == "2024-05-01 09:08:07.004"

    def test_line_format(self) -> None:
        moment = datetime(2024, 12, 31, 23, 59, 59, 999999)
        assert format_line("Entering online status", moment) == (
            "[2024-12-31 23:59:59.999] Entering online status\n"
        )


class TestEventLog:
    """Tests for EventLog class."""

    def test_creates_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "host1"
        log = EventLog(path)
        log.close()
        assert path.exists()

    def test_appends_to_existing_file(self, tmp_path: Path) -> None:
        """Existing content from earlier runs is kept."""
        path = tmp_path / "host1"
        path.write_text("previous run\n")

        log = EventLog(path)
        assert log.write("Ping monitor terminated") is True
        log.close()

        lines = path.read_text().splitlines()
        assert lines[0] == "previous run"
        match = LINE_PATTERN.match(lines[1])
        assert match is not None
        assert match.group(1) == "Ping monitor terminated"

    def test_lines_are_flushed_immediately(self, tmp_path: Path) -> None:
        """A written line is visible before the log is closed."""
        path = tmp_path / "host1"
        log = EventLog(path)
        try:
            log.write("Entering online status")
            assert path.read_text().endswith("Entering online status\n")
        finally:
            log.close()

    def test_unopenable_file_raises(self, tmp_path: Path) -> None:
        """A log inside a missing directory cannot be opened."""
        with pytest.raises(EventLogError, match="Unable to open log file"):
            EventLog(tmp_path / "missing" / "host1")

    def test_write_failure_is_reported_not_raised(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An OSError on write loses the line and logs an error."""
        log = EventLog(tmp_path / "host1")

        class FailingFile:
            def write(self, data: str) -> int:
                raise OSError("No space left on device")

            def close(self) -> None:
                pass

        log._file = FailingFile()  # type: ignore[assignment]
        with caplog.at_level(logging.ERROR, logger="pingwatch.eventlog"):
            assert log.write("Entering online status") is False

        assert "No space left on device" in caplog.text
        log.close()

    def test_write_after_close_is_reported(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        log = EventLog(tmp_path / "host1")
        log.close()

        with caplog.at_level(logging.ERROR, logger="pingwatch.eventlog"):
            assert log.write("late") is False

        assert log.closed
        assert "closed" in caplog.text

    def test_close_is_idempotent(self, tmp_path: Path) -> None:
        log = EventLog(tmp_path / "host1")
        log.close()
        log.close()
        assert log.closed
