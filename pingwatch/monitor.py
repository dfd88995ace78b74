"""Per-target reachability monitor running in its own thread."""

import logging
import time
from collections.abc import Callable
from threading import Event, Thread

from .config import LogConfig, MonitorConfig, TargetConfig
from .eventlog import MSG_ENTERING, MSG_EXITED, MSG_STARTING, MSG_TERMINATED, EventLog
from .models import LivenessState
from .probe import make_probe, validate_address

logger = logging.getLogger(__name__)

Probe = Callable[[str], bool]


class TargetMonitor:
    """Threaded monitor that pings one target and logs state transitions.

    The monitor starts out believing the target is offline. Every cycle it
    sends one probe, logs a pair of lines when the outcome disagrees with the
    current state, then waits on its stop event for one interval. The wait is
    the only place a stop request is noticed, so an in-flight probe always
    completes.

    The address is validated and the log file opened here, before any thread
    exists, so a bad target fails the whole startup.

    Example:
        monitor = TargetMonitor(target, MonitorConfig(), LogConfig())
        monitor.start()
        # ... later ...
        monitor.request_stop()
        monitor.join()
    """

    def __init__(
        self,
        target: TargetConfig,
        monitor_config: MonitorConfig | None = None,
        log_config: LogConfig | None = None,
        probe: Probe | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the monitor.

        Args:
            target: Host to monitor; its name is the log file name.
            monitor_config: Probe interval, timeout and packet options.
            log_config: Directory holding the event log.
            probe: Returns True when the address answered; defaults to an ICMP echo.
            clock: Monotonic clock used for elapsed time between transitions.

        Raises:
            ProbeError: If the target address does not parse.
            EventLogError: If the log file cannot be opened.
        """
        self.target = target
        self._config = monitor_config or MonitorConfig()
        self._address = validate_address(target.address)
        self._probe = probe or make_probe(self._config)
        self._clock = clock
        self._stop_event = Event()
        self._thread: Thread | None = None
        self._state = LivenessState.OFFLINE
        self._state_entered = clock()
        self.error: BaseException | None = None

        log_path = (log_config or LogConfig()).path_for(target)
        self._log = EventLog(log_path)

    @property
    def state(self) -> LivenessState:
        return self._state

    @property
    def stop_event(self) -> Event:
        return self._stop_event

    def start(self) -> Thread:
        """Start the probe loop in a background thread.

        Returns:
            The monitor thread, which doubles as its completion handle.
        """
        if self._thread is not None:
            logger.warning("Monitor for %s already started", self.target.name)
            return self._thread

        thread = Thread(target=self._run, name=f"monitor-{self.target.name}")
        # Only a launched thread owns the log; until then close() releases it
        thread.start()
        self._thread = thread
        logger.info("Monitor started for %s (%s)", self.target.name, self._address)
        return thread

    def request_stop(self) -> None:
        """Ask the loop to exit after its current probe and wait."""
        self._stop_event.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the monitor thread to finish.

        Returns:
            True if the thread has finished.
        """
        if self._thread is None:
            return True
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def is_running(self) -> bool:
        """Check if the probe loop is currently running."""
        return self._thread is not None and self._thread.is_alive()

    def close(self) -> None:
        """Release the log of a monitor that was never started."""
        if self._thread is None:
            self._log.close()

    def _run(self) -> None:
        """Thread body: run the loop, always log termination and close the log."""
        try:
            self._run_loop()
        except Exception as e:
            self.error = e
            logger.exception("Monitor for %s failed", self.target.name)
        finally:
            self._log.write(MSG_TERMINATED)
            self._log.close()
            logger.debug("Monitor for %s exited", self.target.name)

    def _run_loop(self) -> None:
        self._log.write(MSG_STARTING.format(address=self._address))
        self._state = LivenessState.OFFLINE
        self._state_entered = self._clock()

        while True:
            self._observe(self._probe_once())
            if self._stop_event.wait(timeout=self._config.interval):
                break

    def _probe_once(self) -> bool:
        try:
            return bool(self._probe(self._address))
        except OSError as e:
            logger.debug("Probe to %s raised %s, counting as unreachable", self._address, e)
            return False

    def _observe(self, reachable: bool) -> None:
        """Apply one probe outcome to the liveness state machine."""
        observed = LivenessState.from_reachable(reachable)
        if observed is self._state:
            return

        now = self._clock()
        elapsed = max(0, int(now - self._state_entered))
        previous = self._state
        self._state = observed
        self._state_entered = now

        self._log.write(MSG_EXITED.format(state=previous.value, seconds=elapsed))
        self._log.write(MSG_ENTERING.format(state=observed.value))
        logger.info(
            "%s: %s -> %s after %ds",
            self.target.name,
            previous.value.upper(),
            observed.value.upper(),
            elapsed,
        )
