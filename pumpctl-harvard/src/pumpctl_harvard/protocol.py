"""Request/response engine for the Harvard Model 22 pump.

This module provides the :class:`PumpProtocol` class, which owns a
:class:`~pumpctl_serial.SerialTransport` and performs one synchronous
exchange at a time: send a command terminated by CR, wait for the first
reply byte, then accumulate bytes until a prompt character arrives.

Both waits are bounded. The poll interval is derived from the line rate
(roughly four character times) so the loop stays responsive without
busy-spinning::

    interval = 12 bits / baud_rate * poll_scale

Typical usage::

    from pumpctl_harvard.protocol import PumpProtocol

    protocol = PumpProtocol(port)
    result = protocol.query("DIA")
    print(result.value, result.status)
    protocol.close()
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pumpctl_harvard.errors import (
    PumpConnectionError,
    PumpFrameTimeoutError,
    PumpNoResponseError,
)
from pumpctl_harvard.response import QueryResult, is_terminated, parse_response

if TYPE_CHECKING:
    from pumpctl_serial.transport import SerialTransport

logger = logging.getLogger(__name__)

BITS_PER_CHARACTER = 12
LINE_TERMINATOR = "\r"
ENCODING = "ascii"


@dataclass(frozen=True)
class ProtocolTiming:
    """Timing parameters for one exchange.

    Attributes:
        initial_timeout: Seconds to wait for the first reply byte.
        read_timeout: Seconds to wait for the prompt after the first byte.
        poll_scale: Number of character times between polls.
    """

    initial_timeout: float = 1.0
    read_timeout: float = 0.5
    poll_scale: float = 4.0

    def __post_init__(self) -> None:
        if self.initial_timeout <= 0:
            raise ValueError("initial_timeout must be > 0")
        if self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")
        if self.poll_scale <= 0:
            raise ValueError("poll_scale must be > 0")

    def poll_interval(self, baud_rate: int) -> float:
        """Seconds between availability polls at *baud_rate*."""
        return BITS_PER_CHARACTER / baud_rate * self.poll_scale


class PumpProtocol:
    """Synchronous command/reply engine over a serial transport.

    The protocol takes exclusive ownership of the transport: it is the only
    party that reads, writes, or closes it. Exchanges are serialized, so at
    most one command is ever outstanding.

    Args:
        transport: An open transport implementing :class:`SerialTransport`.
        timing: Wait ceilings and poll scaling. Defaults to
            :class:`ProtocolTiming`.
    """

    def __init__(self, transport: SerialTransport, *, timing: ProtocolTiming | None = None) -> None:
        self._transport = transport
        self._timing = timing if timing is not None else ProtocolTiming()
        self._lock = threading.Lock()
        self._closed = False

    # -- Properties ----------------------------------------------------------

    @property
    def timing(self) -> ProtocolTiming:
        """Timing parameters used for every exchange."""
        return self._timing

    @property
    def is_closed(self) -> bool:
        """Return True once :meth:`close` has been called."""
        return self._closed

    # -- Core operations -----------------------------------------------------

    def transact(self, command: str) -> str:
        """Send one command and return the raw reply frame.

        Args:
            command: Command text without the trailing CR.

        Returns:
            The accumulated reply, ending in a prompt character.

        Raises:
            PumpConnectionError: If the protocol has been closed.
            PumpNoResponseError: If no byte arrives within the initial timeout.
            PumpFrameTimeoutError: If the prompt does not arrive within the
                read timeout.
        """
        with self._lock:
            if self._closed:
                raise PumpConnectionError("Pump connection is closed")
            self._transport.flush_input()
            logger.debug("TX %r", command)
            self._transport.write((command + LINE_TERMINATOR).encode(ENCODING))
            reply = self._collect_reply()
            logger.debug("RX %r", reply)
            return reply

    def query(self, command: str) -> QueryResult:
        """Send one command and decode the reply.

        Raises:
            PumpDecodeError: If the reply payload cannot be decoded.
        """
        return parse_response(self.transact(command))

    # -- Lifecycle -----------------------------------------------------------

    def close(self) -> None:
        """Close the underlying transport.

        The transport is closed exactly once; later calls are no-ops.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._transport.close()

    def __enter__(self) -> PumpProtocol:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # -- Private helpers -----------------------------------------------------

    def _collect_reply(self) -> str:
        interval = self._timing.poll_interval(self._transport.baud_rate)

        deadline = time.monotonic() + self._timing.initial_timeout
        while self._transport.bytes_available() == 0:
            if time.monotonic() >= deadline:
                raise PumpNoResponseError("Communication with pump timed out. No data received.")
            time.sleep(interval)

        reply = self._read_pending()
        deadline = time.monotonic() + self._timing.read_timeout
        while not is_terminated(reply):
            if time.monotonic() >= deadline:
                raise PumpFrameTimeoutError("Transmission from pump timed out.", partial=reply)
            time.sleep(interval)
            reply += self._read_pending()
        return reply

    def _read_pending(self) -> str:
        count = self._transport.bytes_available()
        if count == 0:
            return ""
        data = self._transport.read_available(count)
        return data.decode(ENCODING, errors="replace")
