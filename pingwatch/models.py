"""Data models for reachability monitoring."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class LivenessState(Enum):
    """A monitor's belief about its target's reachability."""

    OFFLINE = "offline"
    ONLINE = "online"

    @classmethod
    def from_reachable(cls, reachable: bool) -> "LivenessState":
        return cls.ONLINE if reachable else cls.OFFLINE


class ProcessState(Enum):
    """Lifecycle of the whole monitoring process."""

    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class ProbeResult:
    """Result of a single echo request.

    Attributes:
        address: IP address that was probed.
        is_reachable: Whether an echo reply arrived within the timeout.
        response_time_ms: Round-trip time in milliseconds, or None without a reply.
        error_message: Why the probe failed, None on success.
        checked_at: Timestamp when the probe was sent.
    """

    address: str
    is_reachable: bool
    response_time_ms: float | None
    error_message: str | None
    checked_at: datetime
