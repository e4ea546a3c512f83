"""Harvard Apparatus Model 22 syringe pump driver.

Wraps a :class:`PumpProtocol` with one typed method per pump operation.
Setters report rejected arguments as ``False``; getters return the numeric
reading; motion commands return the pump status after the command.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from pumpctl_core.errors import ConfigError, PumpctlError
from pumpctl_serial import SerialPort, SerialSettings

from pumpctl_harvard import command as cmd
from pumpctl_harvard.command import Direction, RateUnits
from pumpctl_harvard.errors import PumpConnectionError, PumpDecodeError, PumpValidationError
from pumpctl_harvard.protocol import PumpProtocol, ProtocolTiming
from pumpctl_harvard.response import PumpStatus, QueryResult

if TYPE_CHECKING:
    from pumpctl_harvard.config import PumpConfig

logger = logging.getLogger(__name__)

SUPPORTED_BAUD_RATES: tuple[int, ...] = (300, 1200, 2400, 9600)
DEFAULT_BAUD_RATE = 9600


class SyringePump:
    """High-level driver for a Harvard Model 22 syringe pump.

    On construction the driver checks that the pump answers a status query
    and then clears the target volume. If either step fails the protocol
    (and with it the transport) is closed before the error is raised.

    Args:
        protocol: A :class:`PumpProtocol` owning an open transport.
        initialize: Run the status probe and target reset. Defaults to True.

    Raises:
        PumpConnectionError: If the pump does not answer during construction.

    Example:
        >>> with create_instrument("/dev/ttyUSB0") as pump:
        ...     pump.set_diameter(10)
        ...     pump.set_rate(3, "ml/m")
        ...     pump.set_target_volume(0.2)
        ...     pump.run()
    """

    def __init__(self, protocol: PumpProtocol, *, initialize: bool = True) -> None:
        self._protocol = protocol
        self._last_status = PumpStatus.UNKNOWN
        if initialize:
            self._initialize()

    # -- Status / lifecycle -------------------------------------------------

    @property
    def last_status(self) -> PumpStatus:
        """Status reported by the most recent reply."""
        return self._last_status

    @property
    def is_closed(self) -> bool:
        """Return True once the connection has been closed."""
        return self._protocol.is_closed

    def get_status(self) -> PumpStatus:
        """Query the pump state (stopped, forward, reverse, stalled, unknown)."""
        return self._query(cmd.STATUS).status

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        self._protocol.close()

    def __enter__(self) -> SyringePump:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # -- Setters ------------------------------------------------------------

    def set_rate(self, rate: float, units: RateUnits | str | None = RateUnits.ML_PER_MIN) -> bool:
        """Set the pumping rate.

        Args:
            rate: Rate value (> 0), sent as at most five characters.
            units: ``"ul/m"``, ``"ml/hr"``, ``"ul/hr"`` or ``"ml/m"``.
                Anything else is treated as ``"ml/m"``.

        Returns:
            True on success, False if the value was rejected.
        """
        return self._set(lambda: cmd.encode_set_rate(rate, units))

    def set_diameter(self, diameter: float) -> bool:
        """Set the syringe inside diameter in mm.

        Returns:
            True on success, False if the value was rejected.
        """
        return self._set(lambda: cmd.encode_set_diameter(diameter))

    def set_target_volume(self, volume: float) -> bool:
        """Set the volume in ml to dispense before stopping.

        Returns:
            True on success, False if the value was rejected.
        """
        return self._set(lambda: cmd.encode_set_target_volume(volume))

    # -- Motion -------------------------------------------------------------

    def run(self, direction: Direction | str | None = Direction.FORWARD) -> PumpStatus:
        """Start pumping forward (infuse) or in reverse (withdraw)."""
        return self._query(cmd.encode_run(direction)).status

    def stop(self) -> PumpStatus:
        """Stop the pump."""
        return self._query(cmd.STOP).status

    def clear_target_volume(self) -> PumpStatus:
        """Clear the target volume to zero, disabling dispense mode."""
        return self._query(cmd.CLEAR_TARGET).status

    def reset_pumped_volume(self) -> PumpStatus:
        """Reset the pumped volume accumulator to zero."""
        return self._query(cmd.CLEAR_VOLUME).status

    # -- Getters ------------------------------------------------------------

    def get_diameter(self) -> float:
        """Query the syringe diameter in mm."""
        return self._get_number(cmd.QUERY_DIAMETER)

    def get_rate(self) -> float:
        """Query the rate in the currently selected units."""
        return self._get_number(cmd.QUERY_RATE)

    def get_pumped_volume(self) -> float:
        """Query the volume pumped so far in ml."""
        return self._get_number(cmd.QUERY_VOLUME)

    def get_target_volume(self) -> float:
        """Query the target volume in ml."""
        return self._get_number(cmd.QUERY_TARGET)

    # -- Private helpers ----------------------------------------------------

    def _initialize(self) -> None:
        try:
            self.get_status()
        except PumpctlError as exc:
            self._protocol.close()
            raise PumpConnectionError("Unable to establish connection with pump.") from exc
        try:
            self.clear_target_volume()
        except PumpctlError:
            self._protocol.close()
            raise
        logger.info("Pump connected, status %s", self._last_status.value)

    def _query(self, command: str) -> QueryResult:
        result = self._protocol.query(command)
        self._last_status = result.status
        return result

    def _set(self, encode: Callable[[], str]) -> bool:
        try:
            command = encode()
        except PumpValidationError as exc:
            logger.warning("Argument rejected locally: %s", exc)
            return False
        result = self._query(command)
        if not result.succeeded:
            logger.warning("Pump rejected %r", command)
        return result.succeeded

    def _get_number(self, command: str) -> float:
        result = self._query(command)
        if not result.is_numeric:
            raise PumpDecodeError(f"Expected a numeric reply to {command!r}, got {result.value!r}")
        return float(result.value)


def create_instrument(
    port: str,
    baud_rate: int = DEFAULT_BAUD_RATE,
    *,
    timing: ProtocolTiming | None = None,
) -> SyringePump:
    """Create a syringe pump driver on a serial port.

    Standard factory entry point. Opens the port with the pump's fixed line
    settings (8 data bits, no parity, 2 stop bits, no flow control), wraps
    it in a :class:`PumpProtocol`, and returns a ready-to-use
    :class:`SyringePump`. The port is closed if the pump does not answer.

    Args:
        port: Serial port name (e.g. ``"/dev/ttyUSB0"`` or ``"COM8"``).
        baud_rate: 300, 1200, 2400 or 9600; must match the pump setting.
        timing: Optional protocol timing overrides.

    Returns:
        Connected pump driver instance.

    Raises:
        ConfigError: If the baud rate is not supported.
        TransportError: If the port cannot be opened.
        PumpConnectionError: If the pump does not answer.
    """
    if baud_rate not in SUPPORTED_BAUD_RATES:
        raise ConfigError(
            f"Unsupported baud rate {baud_rate!r}; expected one of {SUPPORTED_BAUD_RATES}"
        )
    serial_port = SerialPort(port, SerialSettings(baud_rate=baud_rate, stop_bits=2))
    serial_port.open()
    return SyringePump(PumpProtocol(serial_port, timing=timing))


def open_pump(config: PumpConfig) -> SyringePump:
    """Create a syringe pump driver from a :class:`PumpConfig`."""
    return create_instrument(config.port, config.baud_rate, timing=config.timing)
