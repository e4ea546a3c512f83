"""Core library for pumpctl instrument drivers.

This package provides the exception hierarchy shared by every pumpctl
package. It has no external dependencies (stdlib-only) so it can serve as
the base layer for the transport and driver packages.

Example:
    >>> from pumpctl_core import PumpctlError
    >>> try:
    ...     pump.get_rate()
    ... except PumpctlError as exc:
    ...     print(f"Pump failure: {exc}")
"""

from pumpctl_core.errors import (
    ConfigError,
    ProtocolError,
    PumpctlError,
    TransportError,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Errors
    "ConfigError",
    "ProtocolError",
    "PumpctlError",
    "TransportError",
]
