"""Connection configuration loading for the syringe pump.

A pump config names the serial port and baud rate, and may tune the
protocol timing.

Example YAML:
    pump:
      port: "/dev/ttyUSB0"
      baud_rate: 9600

    timing:
      initial_timeout: 1.0
      read_timeout: 0.5
      poll_scale: 4.0
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from pumpctl_core.errors import ConfigError

from pumpctl_harvard.protocol import ProtocolTiming
from pumpctl_harvard.pump import DEFAULT_BAUD_RATE, SUPPORTED_BAUD_RATES

DEFAULT_PORT = "COM1"


@dataclass(frozen=True)
class PumpConfig:
    """Serial connection parameters for one pump.

    Attributes:
        port: Serial port name (e.g. ``"/dev/ttyUSB0"`` or ``"COM8"``).
        baud_rate: Line rate configured on the pump (300, 1200, 2400, 9600).
        timing: Protocol wait ceilings and poll scaling.
    """

    port: str = DEFAULT_PORT
    baud_rate: int = DEFAULT_BAUD_RATE
    timing: ProtocolTiming = field(default_factory=ProtocolTiming)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.port:
            raise ConfigError("port must be non-empty")
        if self.baud_rate not in SUPPORTED_BAUD_RATES:
            raise ConfigError(
                f"baud_rate must be one of {SUPPORTED_BAUD_RATES}, got {self.baud_rate!r}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PumpConfig:
        """Build a config from a parsed YAML mapping.

        Args:
            data: Mapping with a ``pump`` section and an optional ``timing``
                section.

        Returns:
            PumpConfig instance.

        Raises:
            ConfigError: If a section has the wrong shape or a value is invalid.
        """
        pump_data = data.get("pump", {})
        if not isinstance(pump_data, dict):
            raise ConfigError("pump section must be a mapping")
        timing_data = data.get("timing", {})
        if not isinstance(timing_data, dict):
            raise ConfigError("timing section must be a mapping")

        try:
            timing = ProtocolTiming(
                initial_timeout=float(timing_data.get("initial_timeout", 1.0)),
                read_timeout=float(timing_data.get("read_timeout", 0.5)),
                poll_scale=float(timing_data.get("poll_scale", 4.0)),
            )
            baud_rate = int(pump_data.get("baud_rate", DEFAULT_BAUD_RATE))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid pump config: {exc}") from exc

        return cls(
            port=str(pump_data.get("port", DEFAULT_PORT)),
            baud_rate=baud_rate,
            timing=timing,
        )

    def with_overrides(self, port: str | None = None, baud_rate: int | None = None) -> PumpConfig:
        """Return a copy with command-line overrides applied.

        Args:
            port: Replacement port name, or None to keep the current one.
            baud_rate: Replacement baud rate, or None to keep the current one.
        """
        changes: dict[str, Any] = {}
        if port is not None:
            changes["port"] = port
        if baud_rate is not None:
            changes["baud_rate"] = baud_rate
        return replace(self, **changes)


def load_pump_config(path: str | Path) -> PumpConfig:
    """Load pump configuration from a YAML file.

    Args:
        path: Path to the pump configuration YAML file.

    Returns:
        Parsed PumpConfig.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigError: If the file is not a valid pump config.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pump config not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Pump config must be a YAML mapping")

    return PumpConfig.from_dict(data)
