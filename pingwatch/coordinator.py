"""Startup and synchronized shutdown of all target monitors."""

import logging
from dataclasses import dataclass
from threading import Event, Thread

from .config import LogConfig, MonitorConfig, TargetConfig
from .models import ProcessState
from .monitor import Probe, TargetMonitor

logger = logging.getLogger(__name__)


@dataclass
class MonitorHandle:
    """Stop signal and completion handle of one running monitor."""

    name: str
    stop_event: Event
    thread: Thread
    monitor: TargetMonitor


def start_monitors(
    targets: list[TargetConfig],
    monitor_config: MonitorConfig | None = None,
    log_config: LogConfig | None = None,
    probe: Probe | None = None,
) -> list[MonitorHandle]:
    """Create and launch one monitor per target, in input order.

    Every monitor is constructed before any thread starts, so an unparsable
    address or an unopenable log aborts startup with nothing running.

    Raises:
        ProbeError: If a target address does not parse.
        EventLogError: If a target's log file cannot be opened.
        RuntimeError: If a monitor thread cannot be started; monitors
            already launched are stopped and joined first.
    """
    monitors: list[TargetMonitor] = []
    try:
        for target in targets:
            monitors.append(TargetMonitor(target, monitor_config, log_config, probe))
    except Exception:
        for monitor in monitors:
            monitor.close()
        raise

    handles: list[MonitorHandle] = []
    try:
        for monitor in monitors:
            thread = monitor.start()
            handles.append(
                MonitorHandle(
                    name=monitor.target.name,
                    stop_event=monitor.stop_event,
                    thread=thread,
                    monitor=monitor,
                )
            )
    except Exception as e:
        logger.error("Failed to launch monitor %s: %s", monitor.target.name, e)
        shutdown(handles)
        for unlaunched in monitors[len(handles) :]:
            unlaunched.close()
        raise
    return handles


def wait_for_shutdown(shutdown_event: Event) -> None:
    """Block until the process-wide shutdown event is set."""
    shutdown_event.wait()


def shutdown(handles: list[MonitorHandle], join_timeout: float | None = None) -> None:
    """Stop every monitor, then wait for every monitor.

    All stop signals go out before the first join so the monitors' final waits
    overlap; shutdown takes about one interval however many targets there are.
    Problems with one monitor are logged and never block the others.

    Args:
        handles: Handles returned by start_monitors.
        join_timeout: Per-monitor join limit in seconds; None waits forever.
    """
    for handle in handles:
        if not handle.thread.is_alive():
            logger.error("Error shutting down monitor %s: already exited", handle.name)
        handle.stop_event.set()

    for handle in handles:
        handle.thread.join(timeout=join_timeout)
        if handle.thread.is_alive():
            logger.warning("Monitor %s did not stop within %ss", handle.name, join_timeout)
        elif handle.monitor.error is not None:
            logger.error("Error joining monitor %s: %s", handle.name, handle.monitor.error)
        else:
            logger.debug("Monitor %s joined", handle.name)


class Coordinator:
    """Owns the running monitors and drives the process lifecycle.

    STARTING -> RUNNING once every monitor is launched, RUNNING ->
    SHUTTING_DOWN when the shutdown event fires, SHUTTING_DOWN ->
    TERMINATED once every monitor is joined.
    """

    def __init__(
        self,
        targets: list[TargetConfig],
        monitor_config: MonitorConfig | None = None,
        log_config: LogConfig | None = None,
        probe: Probe | None = None,
        join_timeout: float | None = None,
    ) -> None:
        self._targets = list(targets)
        self._monitor_config = monitor_config
        self._log_config = log_config
        self._probe = probe
        self._join_timeout = join_timeout
        self._handles: list[MonitorHandle] = []
        self.state = ProcessState.STARTING

    @property
    def handles(self) -> list[MonitorHandle]:
        return list(self._handles)

    def start(self) -> None:
        if self.state is not ProcessState.STARTING:
            logger.warning("Coordinator already started")
            return

        self._handles = start_monitors(self._targets, self._monitor_config, self._log_config, self._probe)
        self.state = ProcessState.RUNNING
        logger.info("Started %d monitor(s)", len(self._handles))

    def stop(self) -> None:
        if self.state is not ProcessState.RUNNING:
            return

        self.state = ProcessState.SHUTTING_DOWN
        logger.info("Stopping %d monitor(s)...", len(self._handles))
        shutdown(self._handles, self._join_timeout)
        self._handles = []
        self.state = ProcessState.TERMINATED
        logger.info("All monitors stopped")

    def run(self, shutdown_event: Event) -> None:
        """Start monitors, block until shutdown_event is set, then stop them."""
        self.start()
        try:
            wait_for_shutdown(shutdown_event)
        finally:
            self.stop()
