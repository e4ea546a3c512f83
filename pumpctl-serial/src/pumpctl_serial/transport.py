"""Serial transport protocol definition.

This module defines the :class:`SerialTransport` protocol, which specifies the
byte-level interface that request/response drivers need from a serial link.
Framing is left entirely to the driver: transports never add or strip line
terminators.

Implementations include:
- :class:`pumpctl_serial.SerialPort`: pyserial-backed transport for real hardware
- Emulator transports in device driver packages (e.g., pumpctl-harvard)
"""

from __future__ import annotations

from typing import Protocol


class SerialTransport(Protocol):
    """Protocol for a non-blocking byte transport.

    Implementations provide the physical layer for sending bytes to and
    polling bytes from a serial device. Callers are responsible for opening
    the transport before handing it to a driver; the driver then owns it and
    is the only party that closes it.

    This is a structural subtyping protocol (duck typing). Any class that
    implements the methods below with the correct signatures is considered a
    valid transport.

    Example:
        >>> class LoopbackTransport:
        ...     baud_rate = 9600
        ...     def __init__(self) -> None:
        ...         self._buffer = b""
        ...     def write(self, data: bytes) -> None:
        ...         self._buffer += data
        ...     def bytes_available(self) -> int:
        ...         return len(self._buffer)
        ...     def read_available(self, count: int) -> bytes:
        ...         data, self._buffer = self._buffer[:count], self._buffer[count:]
        ...         return data
        ...     def flush_input(self) -> None:
        ...         self._buffer = b""
        ...     def close(self) -> None:
        ...         pass
        ...
        >>> transport: SerialTransport = LoopbackTransport()  # Type checks OK
    """

    @property
    def baud_rate(self) -> int:
        """Line rate in bits per second."""
        ...

    def write(self, data: bytes) -> None:
        """Queue bytes for transmission.

        Args:
            data: Raw bytes to send, including any protocol terminator.
        """
        ...

    def bytes_available(self) -> int:
        """Return the number of buffered inbound bytes without blocking."""
        ...

    def read_available(self, count: int) -> bytes:
        """Read up to ``count`` buffered bytes without blocking.

        Args:
            count: Maximum number of bytes to return.

        Returns:
            The bytes read, possibly fewer than requested.
        """
        ...

    def flush_input(self) -> None:
        """Discard any buffered inbound bytes."""
        ...

    def close(self) -> None:
        """Close the transport and release resources. Safe to call repeatedly."""
        ...
