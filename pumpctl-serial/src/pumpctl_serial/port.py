"""pyserial transport for serial instruments.

This module provides a pyserial-based transport implementation for
communicating with instruments over RS-232 or USB-serial adapters. The
``serial`` module is imported lazily on :meth:`SerialPort.open` so the rest of
pumpctl-serial (and test code using emulators) works without a port present.

Port names follow the host platform conventions:
- Linux: ``/dev/ttyUSB0``, ``/dev/ttyS0``
- macOS: ``/dev/tty.usbserial-XXXX``
- Windows: ``COM8``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pumpctl_core.errors import TransportError

logger = logging.getLogger(__name__)

_VALID_PARITIES: frozenset[str] = frozenset({"N", "E", "O", "M", "S"})
_VALID_STOP_BITS: frozenset[float] = frozenset({1, 1.5, 2})


@dataclass(frozen=True)
class SerialSettings:
    """Line settings applied when a serial port is opened.

    Attributes:
        baud_rate: Line rate in bits per second.
        data_bits: Number of data bits per character (5-8).
        parity: Parity mode, one of ``N``, ``E``, ``O``, ``M``, ``S``.
        stop_bits: Number of stop bits (1, 1.5 or 2).
        xonxoff: Enable software flow control.
        rtscts: Enable hardware (RTS/CTS) flow control.
    """

    baud_rate: int = 9600
    data_bits: int = 8
    parity: str = "N"
    stop_bits: float = 2
    xonxoff: bool = False
    rtscts: bool = False

    def __post_init__(self) -> None:
        if self.baud_rate <= 0:
            raise ValueError(f"baud_rate must be > 0, got {self.baud_rate!r}")
        if not 5 <= self.data_bits <= 8:
            raise ValueError(f"data_bits must be between 5 and 8, got {self.data_bits!r}")
        if self.parity not in _VALID_PARITIES:
            raise ValueError(f"parity must be one of N/E/O/M/S, got {self.parity!r}")
        if self.stop_bits not in _VALID_STOP_BITS:
            raise ValueError(f"stop_bits must be 1, 1.5 or 2, got {self.stop_bits!r}")


class SerialPort:
    """Byte transport backed by pyserial.

    The port is opened non-blocking (``timeout=0``): reads return whatever is
    buffered and never wait. This class implements the
    :class:`SerialTransport` protocol and can be handed to a driver, which
    then owns it.

    Attributes:
        port: The platform port name.
        settings: Line settings applied on open.
        is_open: Whether the port is currently open.

    Args:
        port: Platform port name (e.g. ``"/dev/ttyUSB0"`` or ``"COM8"``).
        settings: Line settings. Defaults to 9600 baud, 8N2, no flow control.

    Example:
        >>> port = SerialPort("/dev/ttyUSB0", SerialSettings(baud_rate=9600))
        >>> port.open()
        >>> port.write(b"VER\\r")
        >>> port.close()
    """

    def __init__(self, port: str, settings: SerialSettings | None = None) -> None:
        """Initialize the serial port (does not open it).

        Args:
            port: Platform port name.
            settings: Line settings. Defaults to :class:`SerialSettings`.
        """
        self._port = port
        self._settings = settings if settings is not None else SerialSettings()
        self._serial: Any = None

    # -- Properties ----------------------------------------------------------

    @property
    def port(self) -> str:
        """The platform port name."""
        return self._port

    @property
    def settings(self) -> SerialSettings:
        """Line settings applied on open."""
        return self._settings

    @property
    def baud_rate(self) -> int:
        """Line rate in bits per second."""
        return self._settings.baud_rate

    @property
    def is_open(self) -> bool:
        """Return True if the port is currently open."""
        return self._serial is not None

    # -- Lifecycle -----------------------------------------------------------

    def open(self) -> None:
        """Open the serial port.

        Lazily imports ``serial`` (pyserial) and opens the port with the
        configured settings.

        Raises:
            TransportError: If pyserial is not installed or the port cannot
                be opened.
        """
        if self._serial is not None:
            return

        try:
            import serial  # type: ignore[import-untyped]  # pylint: disable=import-outside-toplevel
        except ImportError as exc:
            raise TransportError(
                "pyserial library is not installed. Install with: pip install pyserial"
            ) from exc

        s = self._settings
        try:
            self._serial = serial.Serial(
                port=self._port,
                baudrate=s.baud_rate,
                bytesize=s.data_bits,
                parity=s.parity,
                stopbits=s.stop_bits,
                xonxoff=s.xonxoff,
                rtscts=s.rtscts,
                timeout=0,
            )
        except Exception as exc:
            self._serial = None
            raise TransportError(f"Failed to open serial port {self._port!r}: {exc}") from exc
        logger.info("Opened serial port %s at %d baud", self._port, s.baud_rate)

    def close(self) -> None:
        """Close the serial port.

        Safe to call multiple times.
        """
        if self._serial is None:
            return
        try:
            self._serial.close()
        except Exception:  # pylint: disable=broad-except
            logger.debug("Ignoring error while closing %s", self._port, exc_info=True)
        self._serial = None
        logger.info("Closed serial port %s", self._port)

    def __enter__(self) -> SerialPort:
        self.open()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # -- Transport interface -------------------------------------------------

    def write(self, data: bytes) -> None:
        """Send bytes to the device.

        Args:
            data: Raw bytes to send.

        Raises:
            TransportError: If the port is not open or the write fails.
        """
        ser = self._require_open()
        try:
            ser.write(data)
        except Exception as exc:
            raise TransportError(f"Write to {self._port!r} failed: {exc}") from exc

    def bytes_available(self) -> int:
        """Return the number of bytes waiting in the input buffer.

        Raises:
            TransportError: If the port is not open or the device is gone.
        """
        ser = self._require_open()
        try:
            count: int = ser.in_waiting
        except Exception as exc:
            raise TransportError(f"Polling {self._port!r} failed: {exc}") from exc
        return count

    def read_available(self, count: int) -> bytes:
        """Read up to ``count`` buffered bytes without blocking.

        Raises:
            TransportError: If the port is not open or the read fails.
        """
        ser = self._require_open()
        try:
            data: bytes = ser.read(count)
        except Exception as exc:
            raise TransportError(f"Read from {self._port!r} failed: {exc}") from exc
        return data

    def flush_input(self) -> None:
        """Discard any unread bytes in the input buffer.

        Raises:
            TransportError: If the port is not open or the flush fails.
        """
        ser = self._require_open()
        try:
            ser.reset_input_buffer()
        except Exception as exc:
            raise TransportError(f"Flushing input of {self._port!r} failed: {exc}") from exc

    # -- Private helpers -----------------------------------------------------

    def _require_open(self) -> Any:
        if self._serial is None:
            raise TransportError(f"Serial port {self._port!r} is not open")
        return self._serial
