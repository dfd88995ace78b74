"""Shared fixtures for monitor and coordinator tests."""

from pathlib import Path

import pytest

from pingwatch.config import LogConfig, MonitorConfig


@pytest.fixture
def fast_monitor_config() -> MonitorConfig:
    """Probe cadence short enough for tests."""
    return MonitorConfig(interval=0.01, timeout=0.01)


@pytest.fixture
def log_config(tmp_path: Path) -> LogConfig:
    return LogConfig(directory=str(tmp_path))
