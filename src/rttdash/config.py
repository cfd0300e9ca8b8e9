"""
Configuration for rttdash sessions.

Config files are plain Python modules, so channel tables can be written as
ordinary lists of dicts:

    PROBE = "0669FF555052836687031520"
    TARGET = "stm32f411re"

    CHANNELS = [
        {"up": 0, "down": 0, "name": "Terminal", "format": "text"},
        {"up": 1, "name": "IMU", "format": "binary_le"},
    ]

    SHOW_TIMESTAMPS = True
    LOG_ENABLED = True
    LOG_PATH = "./logs"

Options given on the command line override values from the file.
"""

import importlib.util
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigError
from .rtt.formats import DataFormat

logger = logging.getLogger(__name__)


@dataclass
class ChannelConfig:
    """One explicitly configured tab"""
    up: Optional[int] = None       # Up channel number (target -> host)
    down: Optional[int] = None     # Down channel number (host -> target)
    name: Optional[str] = None     # Tab label, defaults to the firmware's channel name
    format: DataFormat = DataFormat.TEXT

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> "ChannelConfig":
        """Build from a CHANNELS entry of a config file"""
        unknown = set(entry) - {"up", "down", "name", "format"}
        if unknown:
            raise ConfigError(f"Unknown channel keys: {', '.join(sorted(unknown))}")

        config = cls(
            up=entry.get("up"),
            down=entry.get("down"),
            name=entry.get("name"),
            format=DataFormat.parse(entry.get("format", DataFormat.TEXT)),
        )
        for side in ("up", "down"):
            number = getattr(config, side)
            if number is not None and (not isinstance(number, int) or number < 0):
                raise ConfigError(f"Channel '{side}' must be a non-negative integer, got {number!r}")
        return config


@dataclass
class ProbeConfig:
    """Debug probe selection"""
    unique_id: Optional[str] = None   # None picks the only connected probe
    target: Optional[str] = None      # pyocd target name, None auto-detects
    transport: str = "pyocd"


@dataclass
class RttConfig:
    """RTT attach and dashboard settings"""
    channels: list[ChannelConfig] = field(default_factory=list)
    show_timestamps: bool = True
    log_enabled: bool = False
    log_path: Path = Path("./logs")
    timeout: float = 3.0                  # Seconds to wait for the control block
    address: Optional[int] = None         # Control block address, None scans RAM
    scan_size: Optional[int] = None       # Bytes of RAM to scan from `address`
    poll_interval: float = 1 / 60         # Seconds between channel polls
    frame_decoder: Optional[str] = None   # "module:factory" for structured channels
    elf: Optional[Path] = None            # Firmware image handed to the frame decoder factory


@dataclass
class DashConfig:
    """Complete session configuration"""
    name: str = "default"
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    rtt: RttConfig = field(default_factory=RttConfig)


def load_config_file(config_path: str | Path) -> DashConfig:
    """
    Load configuration from a Python file.

    Returns:
        DashConfig object

    Raises:
        ConfigError: if the file is missing, fails to execute, or holds
            invalid values
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    spec = importlib.util.spec_from_file_location("rttdash_config", config_path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Could not load config file: {config_path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ConfigError(f"Error in config file {config_path}: {e}") from e

    config = DashConfig(name=config_path.stem)

    # Probe
    config.probe.unique_id = getattr(module, 'PROBE', None)
    config.probe.target = getattr(module, 'TARGET', None)
    config.probe.transport = getattr(module, 'TRANSPORT', "pyocd")

    # Channels
    entries = getattr(module, 'CHANNELS', [])
    if not isinstance(entries, (list, tuple)):
        raise ConfigError("CHANNELS must be a list of dicts")
    config.rtt.channels = [ChannelConfig.from_dict(entry) for entry in entries]

    # Dashboard
    rtt = config.rtt
    rtt.show_timestamps = bool(getattr(module, 'SHOW_TIMESTAMPS', rtt.show_timestamps))
    rtt.log_enabled = bool(getattr(module, 'LOG_ENABLED', rtt.log_enabled))
    rtt.log_path = Path(getattr(module, 'LOG_PATH', rtt.log_path))
    rtt.timeout = float(getattr(module, 'TIMEOUT', rtt.timeout))
    rtt.address = getattr(module, 'RTT_ADDRESS', rtt.address)
    rtt.scan_size = getattr(module, 'SCAN_SIZE', rtt.scan_size)
    rtt.poll_interval = float(getattr(module, 'POLL_INTERVAL', rtt.poll_interval))
    rtt.frame_decoder = getattr(module, 'FRAME_DECODER', rtt.frame_decoder)

    elf = getattr(module, 'ELF', None)
    if elf is not None:
        rtt.elf = Path(elf)

    if rtt.poll_interval <= 0:
        raise ConfigError("POLL_INTERVAL must be positive")

    return config


def parse_int(value: str) -> int:
    """Parse a decimal or 0x-prefixed hex integer"""
    try:
        return int(value, 0)
    except ValueError:
        raise ConfigError(f"Invalid number: {value}") from None


def prepare_log_dir(rtt: RttConfig) -> Optional[Path]:
    """
    Create the log directory if logging is enabled.

    Returns the directory, or None when logging is disabled or the
    directory cannot be created (logging is then skipped for the session).
    """
    if not rtt.log_enabled:
        return None

    try:
        rtt.log_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Could not create log directory %s: %s", rtt.log_path, e)
        return None

    return rtt.log_path


def default_session_name(target: Optional[str] = None) -> str:
    """Session name used as the log file prefix, e.g. stm32f411re_2024-05-01T10-15-00"""
    stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    return f"{target or 'target'}_{stamp}"
