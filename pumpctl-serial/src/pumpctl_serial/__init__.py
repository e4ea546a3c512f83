"""Serial transport library for pumpctl instrument drivers.

This package provides the byte-level transport layer that serial instrument
drivers build on. It includes:

- A structural protocol describing the non-blocking transport a driver needs
- A pyserial-backed implementation for real ports
- Line settings with validation

Typical usage::

    from pumpctl_serial import SerialPort, SerialSettings

    port = SerialPort("/dev/ttyUSB0", SerialSettings(baud_rate=9600, stop_bits=2))
    port.open()
    port.write(b"RAT\\r")
    port.close()
"""

from pumpctl_serial.port import SerialPort, SerialSettings
from pumpctl_serial.transport import SerialTransport

__all__ = [
    # Port
    "SerialPort",
    "SerialSettings",
    # Transport
    "SerialTransport",
]
