"""pingwatch - Log when hosts go online and offline."""

import argparse
import logging
import signal
import sys
from threading import Event
from typing import Optional

__version__ = "0.1.0"

DEFAULT_CONFIG = "settings.yaml"

# Global shutdown event for signal handlers
_shutdown_event: Optional[Event] = None

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def _handle_shutdown(signum: int, frame: object) -> None:
    """Signal handler for graceful shutdown."""
    sig_name = signal.Signals(signum).name
    if _shutdown_event is None:
        return
    if _shutdown_event.is_set():
        logger.info("Received %s, shutdown already in progress", sig_name)
        return
    logger.info("Received %s, initiating shutdown...", sig_name)
    _shutdown_event.set()


def _install_signal_handlers() -> Event:
    """Route SIGINT and SIGTERM to a fresh shutdown event."""
    global _shutdown_event

    _shutdown_event = Event()
    signal.signal(signal.SIGTERM, _handle_shutdown)
    signal.signal(signal.SIGINT, _handle_shutdown)
    return _shutdown_event


def _cmd_run(args: argparse.Namespace) -> None:
    """Execute the run command - monitor every target until signalled."""
    _setup_logging(args.verbose)

    logger.info("pingwatch %s starting...", __version__)

    # Import here to allow logging setup first
    from .config import ConfigError, load_config
    from .coordinator import Coordinator, wait_for_shutdown
    from .eventlog import EventLogError
    from .probe import ProbeError

    # 1. Load configuration
    try:
        config = load_config(args.config)
        logger.info("Configuration loaded from %s", args.config)
        logger.info(
            "Monitoring %d target(s) at %ss interval, %ss timeout",
            len(config.targets),
            config.monitor.interval,
            config.monitor.timeout,
        )
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    # 2. Setup shutdown handler before any thread exists
    shutdown_event = _install_signal_handlers()

    # 3. Start monitors and wait for the shutdown signal
    coordinator = Coordinator(config.targets, config.monitor, config.log)
    try:
        coordinator.start()
    except (ProbeError, EventLogError, RuntimeError) as e:
        logger.error("Startup error: %s", e)
        sys.exit(1)

    logger.info("All monitors started, waiting for shutdown signal...")
    try:
        wait_for_shutdown(shutdown_event)
    except KeyboardInterrupt:
        # Backup handler if signal doesn't work
        logger.info("Keyboard interrupt received")
    finally:
        coordinator.stop()
        logger.info("Shutdown complete")


def _cmd_probe(args: argparse.Namespace) -> None:
    """Execute the probe command - ping every target once and report."""
    from .config import ConfigError, load_config
    from .probe import check_reachability

    # 1. Load configuration
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    # 2. Probe each target in order
    print(f"Probing {len(config.targets)} target(s)...\n")
    reachable_count = 0
    for target in config.targets:
        result = check_reachability(target.address, config.monitor)
        if result.is_reachable:
            reachable_count += 1
            print(f"REACHABLE:   {target.name} ({target.address}) {result.response_time_ms:.1f}ms")
        else:
            print(f"UNREACHABLE: {target.name} ({target.address}) {result.error_message}")

    total_count = len(config.targets)
    print(f"\nResult: {reachable_count}/{total_count} targets reachable")

    if reachable_count < total_count:
        sys.exit(1)


def main() -> None:
    """Main entry point for the pingwatch package."""
    parser = argparse.ArgumentParser(description="pingwatch - Log when hosts go online and offline")
    parser.add_argument(
        "--version",
        action="version",
        version=f"pingwatch {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # Run subcommand (default behavior)
    run_parser = subparsers.add_parser(
        "run",
        help="Monitor all targets until interrupted (default)",
    )
    run_parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG})",
    )
    run_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )
    run_parser.set_defaults(func=_cmd_run)

    # Probe subcommand
    probe_parser = subparsers.add_parser(
        "probe",
        help="Ping every target once and report reachability",
    )
    probe_parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG})",
    )
    probe_parser.set_defaults(func=_cmd_probe)

    args = parser.parse_args()

    # Default to 'run' if no command specified
    if args.command is None:
        args.config = DEFAULT_CONFIG
        args.verbose = False
        args.func = _cmd_run

    args.func(args)
