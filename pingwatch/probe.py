"""ICMP echo probe and address validation."""

import ipaddress
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from ping3 import ping

from .config import MonitorConfig
from .models import ProbeResult

logger = logging.getLogger(__name__)


class ProbeError(Exception):
    """Raised when a target address cannot be probed at all."""

    pass


def validate_address(address: str) -> str:
    """Check that an address is an IPv4 or IPv6 literal.

    Returns:
        The address in its canonical textual form.

    Raises:
        ProbeError: If the address does not parse.
    """
    try:
        return str(ipaddress.ip_address(address))
    except ValueError:
        raise ProbeError(f"Unparsable ip address: {address!r}")


def check_reachability(address: str, monitor_config: MonitorConfig | None = None) -> ProbeResult:
    """Send one echo request and wait for the reply.

    ping3 returns the delay on success, None on timeout and False on other
    errors (unknown host, send failure). Socket errors it lets through, such
    as a missing permission for ICMP sockets, count as unreachable too.

    Args:
        address: IP address to probe.
        monitor_config: Probe timeout, TTL and payload size; defaults when None.

    Returns:
        ProbeResult describing the outcome.
    """
    cfg = monitor_config or MonitorConfig()
    checked_at = datetime.now(UTC)

    try:
        delay = ping(address, timeout=cfg.timeout, unit="ms", ttl=cfg.ttl, size=cfg.payload_size)
    except OSError as e:
        logger.debug("Probe to %s failed: %s", address, e)
        return ProbeResult(
            address=address,
            is_reachable=False,
            response_time_ms=None,
            error_message=str(e),
            checked_at=checked_at,
        )

    # 0.0 is a valid delay on loopback, so compare by identity
    if delay is None or delay is False:
        error = f"No reply within {cfg.timeout}s" if delay is None else "Echo request failed"
        return ProbeResult(
            address=address,
            is_reachable=False,
            response_time_ms=None,
            error_message=error,
            checked_at=checked_at,
        )

    return ProbeResult(
        address=address,
        is_reachable=True,
        response_time_ms=float(delay),
        error_message=None,
        checked_at=checked_at,
    )


def make_probe(monitor_config: MonitorConfig) -> Callable[[str], bool]:
    """Build the boolean probe a monitor calls once per cycle."""

    def probe(address: str) -> bool:
        return check_reachability(address, monitor_config).is_reachable

    return probe
