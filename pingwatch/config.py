"""Configuration loader with type-safe dataclasses."""

import ipaddress
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


# ICMP payload limit: 65535 - 20 (IP header) - 8 (ICMP header)
MAX_PAYLOAD_SIZE = 65507


@dataclass(frozen=True)
class MonitorConfig:
    """Configuration for the per-target probe loop."""

    interval: float = 1.0  # seconds between probes (stop-wait timeout)
    timeout: float = 1.0  # seconds to wait for an echo reply
    ttl: int = 128
    payload_size: int = 4

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ConfigError(f"Monitor interval must be positive (got {self.interval})")
        if self.timeout <= 0:
            raise ConfigError(f"Probe timeout must be positive (got {self.timeout})")
        if not (1 <= self.ttl <= 255):
            raise ConfigError(f"TTL must be between 1 and 255 (got {self.ttl})")
        if not (0 <= self.payload_size <= MAX_PAYLOAD_SIZE):
            raise ConfigError(f"Payload size must be between 0 and {MAX_PAYLOAD_SIZE} (got {self.payload_size})")


@dataclass(frozen=True)
class TargetConfig:
    """A host to monitor.

    The name is used verbatim as the file name of the target's event log.
    """

    name: str
    address: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigError("Target name cannot be empty")
        if not self.address:
            raise ConfigError(f"Target address cannot be empty for '{self.name}'")


@dataclass(frozen=True)
class LogConfig:
    """Where per-target event logs are written."""

    directory: str = "."

    def __post_init__(self) -> None:
        if not self.directory:
            raise ConfigError("Log directory cannot be empty")

    def path_for(self, target: TargetConfig) -> Path:
        return Path(self.directory) / target.name


@dataclass(frozen=True)
class Config:
    """Main configuration container."""

    targets: list[TargetConfig]
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def __post_init__(self) -> None:
        if not self.targets:
            raise ConfigError("At least one target must be configured")
        names = [target.name for target in self.targets]
        duplicates = [name for name in names if names.count(name) > 1]
        if duplicates:
            raise ConfigError(f"Duplicate target names found: {set(duplicates)}")
        # Distinct names can still point at one file, e.g. "host1" and "./host1"
        owners: dict[Path, str] = {}
        for target in self.targets:
            path = self.log.path_for(target).resolve()
            if path in owners:
                raise ConfigError(f"Targets '{owners[path]}' and '{target.name}' share log file {path}")
            owners[path] = target.name


def _get_field(data: dict, index: int, key: str, alias: str) -> str:
    """Read a required string field, accepting the legacy key as an alias."""
    value = data.get(key, data.get(alias))
    if value is None:
        raise ConfigError(f"Target entry {index} is missing '{key}' field")
    if not isinstance(value, str):
        raise ConfigError(f"Target entry {index} field '{key}' must be a string")
    return value


def _parse_target_config(data: dict, index: int) -> TargetConfig:
    """Parse a single target entry."""
    if not isinstance(data, dict):
        raise ConfigError(f"Target entry {index} must be a dictionary")

    name = _get_field(data, index, "name", "logname")
    address = _get_field(data, index, "address", "ip")

    try:
        ipaddress.ip_address(address)
    except ValueError:
        raise ConfigError(f"Unparsable address '{address}' for target '{name}'")

    return TargetConfig(name=name, address=address)


def _parse_monitor_config(data: dict | None) -> MonitorConfig:
    """Parse monitor configuration section."""
    if data is None:
        return MonitorConfig()
    if not isinstance(data, dict):
        raise ConfigError("'monitor' section must be a dictionary")

    try:
        return MonitorConfig(
            interval=float(data.get("interval", 1.0)),
            timeout=float(data.get("timeout", 1.0)),
            ttl=int(data.get("ttl", 128)),
            payload_size=int(data.get("payload_size", 4)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in 'monitor' section: {e}")


def _parse_log_config(data: dict | None) -> LogConfig:
    """Parse log configuration section."""
    if data is None:
        return LogConfig()
    if not isinstance(data, dict):
        raise ConfigError("'log' section must be a dictionary")

    return LogConfig(directory=str(data.get("directory", ".")))


def _apply_env_overrides(config_data: dict) -> dict:
    """Apply environment variable overrides to configuration.

    Supported overrides:
    - PINGWATCH_MONITOR_INTERVAL: Override monitor.interval
    - PINGWATCH_MONITOR_TIMEOUT: Override monitor.timeout
    - PINGWATCH_LOG_DIR: Override log.directory
    """
    if config_data.get("monitor") is None:
        config_data["monitor"] = {}
    if config_data.get("log") is None:
        config_data["log"] = {}

    # Malformed sections are left alone so the section parsers report them
    monitor = config_data["monitor"]
    log = config_data["log"]

    monitor_interval = os.environ.get("PINGWATCH_MONITOR_INTERVAL")
    if monitor_interval is not None and isinstance(monitor, dict):
        monitor["interval"] = monitor_interval

    monitor_timeout = os.environ.get("PINGWATCH_MONITOR_TIMEOUT")
    if monitor_timeout is not None and isinstance(monitor, dict):
        monitor["timeout"] = monitor_timeout

    log_dir = os.environ.get("PINGWATCH_LOG_DIR")
    if log_dir is not None and isinstance(log, dict):
        log["directory"] = log_dir

    return config_data


def load_config(config_path: str) -> Config:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If the file cannot be read or configuration is invalid.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML dictionary")

    data = _apply_env_overrides(data)

    targets_data = data.get("targets")
    if targets_data is None:
        raise ConfigError("Configuration must contain a 'targets' section")
    if not isinstance(targets_data, list):
        raise ConfigError("'targets' must be a list")

    targets = [_parse_target_config(target_data, i) for i, target_data in enumerate(targets_data)]

    return Config(
        targets=targets,
        monitor=_parse_monitor_config(data.get("monitor")),
        log=_parse_log_config(data.get("log")),
    )
