"""Harvard Model 22 syringe pump emulator.

Provides an in-process emulator implementing the ``SerialTransport`` protocol.
Commands are accepted byte by byte, executed when CR arrives, and answered
with the same framing the real pump uses::

    query / out of range:   CR LF <value> CR LF <prompt>
    acknowledgment:         CR LF <prompt>
    unknown command:        CR LF ?
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from pumpctl_core.errors import TransportError

from pumpctl_harvard.response import OUT_OF_RANGE, REJECTED, PumpStatus

_PROMPTS: dict[PumpStatus, str] = {
    PumpStatus.STOPPED: ":",
    PumpStatus.FORWARD: ">",
    PumpStatus.REVERSE: "<",
    PumpStatus.STALLED: "*",
}

# ml/min per unit for each rate command
_RATE_SCALE: dict[str, float] = {
    "MLM": 1.0,
    "MLH": 1.0 / 60.0,
    "ULM": 1.0 / 1000.0,
    "ULH": 1.0 / 60000.0,
}

_COMMAND_RE = re.compile(r"^([A-Z]{3})\s*(.*)$")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pump22EmulatorConfig:
    """Configuration for a Model 22 pump emulator instance.

    Args:
        baud_rate: Line rate reported to the protocol engine.
        min_diameter: Smallest accepted syringe diameter in mm (> 0).
        max_diameter: Largest accepted syringe diameter in mm.
        max_rate: Largest accepted rate in ml/min (> 0).
        max_volume: Largest accepted target volume in ml (> 0).
        chunk_size: Bytes revealed per ``bytes_available`` call, 0 for all.
    """

    baud_rate: int = 9600
    min_diameter: float = 0.1
    max_diameter: float = 35.0
    max_rate: float = 55.0
    max_volume: float = 1000.0
    chunk_size: int = 0

    def __post_init__(self) -> None:
        if self.baud_rate <= 0:
            raise ValueError("baud_rate must be > 0")
        if self.min_diameter <= 0:
            raise ValueError("min_diameter must be > 0")
        if self.max_diameter < self.min_diameter:
            raise ValueError("max_diameter must be >= min_diameter")
        if self.max_rate <= 0:
            raise ValueError("max_rate must be > 0")
        if self.max_volume <= 0:
            raise ValueError("max_volume must be > 0")
        if self.chunk_size < 0:
            raise ValueError("chunk_size must be >= 0")


# ---------------------------------------------------------------------------
# Internal pump state
# ---------------------------------------------------------------------------


@dataclass
class _PumpState:
    diameter: float = 10.0
    rate: float = 1.0
    rate_command: str = "MLM"
    target_volume: float = 0.0
    pumped_volume: float = 0.0
    status: PumpStatus = PumpStatus.STOPPED


# ---------------------------------------------------------------------------
# Emulator
# ---------------------------------------------------------------------------


class Pump22Emulator:
    """In-process Model 22 pump emulator implementing ``SerialTransport``.

    Attributes:
        mute: When True, commands are executed but never answered.
        drop_terminator: When True, replies are sent without their prompt.
        written: Commands received so far, without the CR.
        close_count: Number of times :meth:`close` was called.

    Args:
        config: Emulator configuration.
    """

    def __init__(self, config: Pump22EmulatorConfig) -> None:
        self._config = config
        self._state = _PumpState()
        self._tx = ""
        self._rx = bytearray()
        self._revealed = 0
        self._injected: list[str] = []
        self._open = True
        self.mute = False
        self.drop_terminator = False
        self.written: list[str] = []
        self.close_count = 0

        self._fixed_handlers: dict[str, Callable[[], str]] = {
            "": self._ack,
            "RUN": lambda: self._start(PumpStatus.FORWARD),
            "REV": lambda: self._start(PumpStatus.REVERSE),
            "STP": self._stop,
            "CLT": self._clear_target,
            "CLV": self._clear_volume,
            "DIA": lambda: self._value(self._state.diameter),
            "RAT": lambda: self._value(self._state.rate),
            "VOL": lambda: self._value(self._state.pumped_volume),
            "TAR": lambda: self._value(self._state.target_volume),
        }

        self._set_handlers: dict[str, Callable[[str, float], str]] = {
            "MMD": self._set_diameter,
            "MLT": self._set_target_volume,
            **{name: self._set_rate for name in _RATE_SCALE},
        }

    # -- Transport interface ------------------------------------------------

    @property
    def baud_rate(self) -> int:
        """Line rate in bits per second."""
        return self._config.baud_rate

    def write(self, data: bytes) -> None:
        """Accept command bytes, executing each CR-terminated command."""
        if not self._open:
            raise TransportError("Emulator is closed")
        self._tx += data.decode("ascii")
        while "\r" in self._tx:
            line, self._tx = self._tx.split("\r", 1)
            self.written.append(line)
            reply = self._execute(line)
            if self._injected:
                reply = self._injected.pop(0)
            if self.mute:
                continue
            if self.drop_terminator:
                reply = reply[:-1]
            self._rx += reply.encode("ascii")

    def bytes_available(self) -> int:
        """Return the number of reply bytes ready to read."""
        if self._config.chunk_size == 0:
            self._revealed = len(self._rx)
        else:
            self._revealed = min(len(self._rx), self._revealed + self._config.chunk_size)
        return self._revealed

    def read_available(self, count: int) -> bytes:
        """Return up to *count* revealed reply bytes."""
        n = min(count, self._revealed)
        data = bytes(self._rx[:n])
        del self._rx[:n]
        self._revealed -= n
        return data

    def flush_input(self) -> None:
        """Discard pending reply bytes."""
        self._rx.clear()
        self._revealed = 0

    def close(self) -> None:
        """Mark the emulator closed and count the call."""
        self._open = False
        self.close_count += 1

    # -- Test helpers -------------------------------------------------------

    @property
    def is_open(self) -> bool:
        """Return True until :meth:`close` is called."""
        return self._open

    @property
    def status(self) -> PumpStatus:
        """Current pump state."""
        return self._state.status

    @property
    def rate_command(self) -> str:
        """Rate command last accepted (``MLM``, ``ULM``, ...)."""
        return self._state.rate_command

    def dispense(self, volume: float) -> None:
        """Advance the pumped volume while running.

        Stops the pump when a non-zero target volume is reached.

        Args:
            volume: Volume in ml delivered since the last call.
        """
        state = self._state
        if state.status not in (PumpStatus.FORWARD, PumpStatus.REVERSE):
            return
        state.pumped_volume += volume
        if state.target_volume > 0 and state.pumped_volume >= state.target_volume:
            state.pumped_volume = state.target_volume
            state.status = PumpStatus.STOPPED

    def stall(self) -> None:
        """Simulate a motor stall; cleared by the next run or stop."""
        self._state.status = PumpStatus.STALLED

    def inject_reply(self, text: str) -> None:
        """Replace the next reply with *text* verbatim."""
        self._injected.append(text)

    # -- Private helpers ----------------------------------------------------

    def _execute(self, line: str) -> str:
        command = line.strip().upper()
        handler = self._fixed_handlers.get(command)
        if handler is not None:
            return handler()

        match = _COMMAND_RE.match(command)
        if match is None:
            return self._rejected()
        name, args = match.groups()
        handler_set = self._set_handlers.get(name)
        if handler_set is None:
            return self._rejected()
        try:
            value = float(args)
        except ValueError:
            return self._rejected()
        return handler_set(name, value)

    def _prompt(self) -> str:
        return _PROMPTS[self._state.status]

    def _ack(self) -> str:
        return "\r\n" + self._prompt()

    def _value(self, value: float) -> str:
        return f"\r\n{value:.4f}\r\n{self._prompt()}"

    def _out_of_range(self) -> str:
        return f"\r\n{OUT_OF_RANGE}\r\n{self._prompt()}"

    def _rejected(self) -> str:
        return "\r\n" + REJECTED

    # -- Command handlers ---------------------------------------------------

    def _start(self, status: PumpStatus) -> str:
        self._state.status = status
        return self._ack()

    def _stop(self) -> str:
        self._state.status = PumpStatus.STOPPED
        return self._ack()

    def _clear_target(self) -> str:
        self._state.target_volume = 0.0
        return self._ack()

    def _clear_volume(self) -> str:
        self._state.pumped_volume = 0.0
        return self._ack()

    def _set_diameter(self, _name: str, value: float) -> str:
        if not self._config.min_diameter <= value <= self._config.max_diameter:
            return self._out_of_range()
        self._state.diameter = value
        return self._ack()

    def _set_target_volume(self, _name: str, value: float) -> str:
        if not 0 < value <= self._config.max_volume:
            return self._out_of_range()
        self._state.target_volume = value
        return self._ack()

    def _set_rate(self, name: str, value: float) -> str:
        ml_per_min = value * _RATE_SCALE[name]
        if not 0 < ml_per_min <= self._config.max_rate:
            return self._out_of_range()
        self._state.rate = value
        self._state.rate_command = name
        return self._ack()


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------


def make_pump22_emulator(**overrides: object) -> Pump22Emulator:
    """Create a Model 22 pump emulator.

    Args:
        **overrides: Field overrides for :class:`Pump22EmulatorConfig`.

    Returns:
        Configured emulator instance (9600 baud, 0.1-35 mm syringes,
        up to 55 ml/min).
    """
    config = Pump22EmulatorConfig(**overrides)  # type: ignore[arg-type]
    return Pump22Emulator(config)
