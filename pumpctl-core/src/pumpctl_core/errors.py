"""Exception types for pumpctl-core.

This module defines the exception hierarchy used throughout pumpctl. All
pumpctl exceptions inherit from PumpctlError, allowing consumers to catch all
driver-specific errors with a single except clause.

Exception hierarchy:
    PumpctlError (base)
    +-- TransportError: Serial port open/IO failures
    +-- ProtocolError: Device exchange failures (timeouts, undecodable replies)
    +-- ConfigError: Invalid or missing configuration values
"""


class PumpctlError(Exception):
    """Base exception for all pumpctl errors.

    This is the root of the pumpctl exception hierarchy. Catch this to handle
    any driver-specific error.
    """


class TransportError(PumpctlError):
    """Raised when the byte transport fails.

    This may occur when the serial port cannot be opened, when an operation
    is attempted on a port that is not open, or when the port reports an
    I/O failure.
    """


class ProtocolError(PumpctlError):
    """Raised when a request/response exchange with a device fails.

    Common causes include a device that never answers, a reply that never
    reaches its terminator, or a reply whose payload cannot be decoded.
    """


class ConfigError(PumpctlError):
    """Raised for invalid configuration.

    This includes malformed configuration files, missing required fields, or
    values outside the range a device accepts.
    """
