"""Harvard Apparatus Model 22 syringe pump driver and emulator for pumpctl.

This package provides a driver and emulator for the Harvard Model 22
syringe pump, which is controlled with short ASCII commands over RS-232.

Modules:
    command: Command encoding (rate units, argument truncation, directions).
    response: Reply framing, status prompts, and value decoding.
    protocol: Timed request/response engine over a serial transport.
    pump: High-level driver with one method per pump operation.
    emulator: In-process byte-level emulator for testing without hardware.
    config: YAML connection configuration.
    cli: Command-line interface.

Example:
    Connect to a real pump::

        from pumpctl_harvard import create_instrument

        with create_instrument("/dev/ttyUSB0", baud_rate=9600) as pump:
            pump.set_diameter(10)
            pump.set_rate(3, "ml/m")
            pump.set_target_volume(0.2)
            pump.run()

    Use an emulator for testing::

        from pumpctl_harvard import PumpProtocol, SyringePump, make_pump22_emulator

        pump = SyringePump(PumpProtocol(make_pump22_emulator()))
        pump.get_status()
"""

from pumpctl_harvard.command import Direction, RateUnits
from pumpctl_harvard.config import PumpConfig, load_pump_config
from pumpctl_harvard.emulator import Pump22Emulator, Pump22EmulatorConfig, make_pump22_emulator
from pumpctl_harvard.errors import (
    PumpConnectionError,
    PumpDecodeError,
    PumpError,
    PumpFrameTimeoutError,
    PumpNoResponseError,
    PumpTimeoutError,
    PumpValidationError,
)
from pumpctl_harvard.protocol import ProtocolTiming, PumpProtocol
from pumpctl_harvard.pump import SUPPORTED_BAUD_RATES, SyringePump, create_instrument, open_pump
from pumpctl_harvard.response import PumpStatus, QueryResult, parse_response, parse_status

__all__ = [
    # Commands
    "Direction",
    "RateUnits",
    # Config
    "PumpConfig",
    "load_pump_config",
    # Emulator
    "Pump22Emulator",
    "Pump22EmulatorConfig",
    "make_pump22_emulator",
    # Errors
    "PumpConnectionError",
    "PumpDecodeError",
    "PumpError",
    "PumpFrameTimeoutError",
    "PumpNoResponseError",
    "PumpTimeoutError",
    "PumpValidationError",
    # Protocol
    "ProtocolTiming",
    "PumpProtocol",
    # Driver
    "SUPPORTED_BAUD_RATES",
    "SyringePump",
    "create_instrument",
    "open_pump",
    # Responses
    "PumpStatus",
    "QueryResult",
    "parse_response",
    "parse_status",
]
