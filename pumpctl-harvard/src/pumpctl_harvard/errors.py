"""Syringe pump driver error types.

This module defines exception classes for failures that may occur while
talking to a Harvard Apparatus Model 22 syringe pump. All exceptions inherit
from :class:`pumpctl_core.errors.PumpctlError`.

Out-of-range replies (``OOR``) and rejected commands (``?``) are not
exceptions: they come back as a failed :class:`~pumpctl_harvard.response.QueryResult`
and the facade setters report them as ``False``.
"""

from __future__ import annotations

from pumpctl_core.errors import ProtocolError, PumpctlError


class PumpError(PumpctlError):
    """Base exception for syringe pump driver errors.

    All pump-related exceptions inherit from this class, allowing callers
    to catch all driver errors with a single except clause.
    """


class PumpValidationError(PumpError, ValueError):
    """Raised when a numeric argument is rejected before transmission.

    Pump arguments must be finite and strictly positive. The facade setters
    catch this and return ``False``; nothing is sent to the device.
    """


class PumpTimeoutError(PumpError, ProtocolError):
    """Base for exchanges that did not complete in time."""


class PumpNoResponseError(PumpTimeoutError):
    """Raised when no reply byte arrives within the initial wait ceiling.

    Usually means the pump is switched off, disconnected, or configured
    for a different baud rate.
    """


class PumpFrameTimeoutError(PumpTimeoutError):
    """Raised when a reply starts but never reaches its terminator.

    Attributes:
        partial: The text accumulated before the deadline expired.
    """

    def __init__(self, message: str, partial: str = "") -> None:
        """Initialize the frame timeout.

        Args:
            message: Human-readable description.
            partial: Reply text received so far.
        """
        self.partial = partial
        super().__init__(message)


class PumpDecodeError(PumpError, ProtocolError):
    """Raised when a reply payload cannot be decoded.

    Raised for a non-numeric payload in a value reply, and by the facade
    getters when the reply carries no value at all.
    """


class PumpConnectionError(PumpError):
    """Raised when the pump cannot be used.

    This occurs when the status probe at construction fails, or when an
    operation is attempted after the connection has been closed.
    """
