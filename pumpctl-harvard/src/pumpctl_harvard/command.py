"""Command encoding for the Harvard Model 22 pump.

Commands are short ASCII mnemonics, optionally followed by a numeric
argument. The pump accepts at most five characters of argument text, so
arguments are formatted with :func:`str` and then cut to five characters.
The cut is applied to the text, not to the numeric precision: ``123.456``
is sent as ``123.4`` and ``12345.6`` as ``12345``.
"""

from __future__ import annotations

import logging
import math
import numbers
from decimal import Decimal
from enum import Enum

from pumpctl_harvard.errors import PumpValidationError

logger = logging.getLogger(__name__)

MAX_ARGUMENT_LENGTH = 5

# Fixed commands
STATUS = ""
RUN = "RUN"
REVERSE = "REV"
STOP = "STP"
CLEAR_TARGET = "CLT"
CLEAR_VOLUME = "CLV"
QUERY_DIAMETER = "DIA"
QUERY_RATE = "RAT"
QUERY_VOLUME = "VOL"
QUERY_TARGET = "TAR"

# Argument-bearing command prefixes
SET_DIAMETER = "MMD"
SET_TARGET_VOLUME = "MLT"


class RateUnits(str, Enum):
    """Rate unit tokens accepted by :func:`encode_set_rate`."""

    UL_PER_MIN = "ul/m"
    ML_PER_HOUR = "ml/hr"
    UL_PER_HOUR = "ul/hr"
    ML_PER_MIN = "ml/m"


# ml/hr is sent as MLM, not MLH.
RATE_COMMANDS: dict[str, str] = {
    RateUnits.UL_PER_MIN.value: "ULM",
    RateUnits.ML_PER_HOUR.value: "MLM",
    RateUnits.UL_PER_HOUR.value: "ULH",
    RateUnits.ML_PER_MIN.value: "MLM",
}

DEFAULT_RATE_COMMAND = "MLM"


class Direction(Enum):
    """Pumping direction."""

    FORWARD = "f"
    REVERSE = "r"

    @classmethod
    def parse(cls, value: Direction | str | None) -> Direction:
        """Interpret a direction argument.

        ``"r"``, ``"rev"`` and ``"reverse"`` (any case) select reverse;
        anything else, including ``None`` and non-string values, selects
        forward.
        """
        if isinstance(value, Direction):
            return value
        if isinstance(value, str) and value.strip().lower() in ("r", "rev", "reverse"):
            return cls.REVERSE
        return cls.FORWARD


def format_argument(value: float) -> str:
    """Format a numeric argument for the wire.

    Other real types (``Decimal``, ``Fraction``, numpy scalars) are converted
    to ``int`` or ``float`` first, so they format like the built-in types.

    Args:
        value: Strictly positive, finite number.

    Returns:
        At most :data:`MAX_ARGUMENT_LENGTH` characters of ``str(value)``.

    Raises:
        PumpValidationError: If *value* is not a finite positive number.
    """
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise PumpValidationError(f"Argument must be a number, got {value!r}")
    if isinstance(value, numbers.Integral):
        value = int(value)
    elif not isinstance(value, float):
        try:
            value = float(value)
        except (ValueError, OverflowError) as exc:
            raise PumpValidationError(f"Argument must be finite and > 0, got {value!r}") from exc
    if (isinstance(value, float) and not math.isfinite(value)) or value <= 0:
        raise PumpValidationError(f"Argument must be finite and > 0, got {value!r}")
    return str(value)[:MAX_ARGUMENT_LENGTH]


def rate_command(units: RateUnits | str | None) -> str:
    """Return the three-letter rate command for a unit token.

    Unrecognized or omitted units fall back to ``MLM`` (ml/min).
    """
    if units is None:
        return DEFAULT_RATE_COMMAND
    token = units.value if isinstance(units, RateUnits) else units
    command = RATE_COMMANDS.get(token)
    if command is None:
        logger.warning("Unrecognized rate units %r, using ml/m", units)
        return DEFAULT_RATE_COMMAND
    return command


def encode_set_rate(rate: float, units: RateUnits | str | None = None) -> str:
    """Encode a set-rate command, e.g. ``MLM3.0``."""
    return rate_command(units) + format_argument(rate)


def encode_set_diameter(diameter: float) -> str:
    """Encode a set-diameter command in mm, e.g. ``MMD 10``."""
    return f"{SET_DIAMETER} {format_argument(diameter)}"


def encode_set_target_volume(volume: float) -> str:
    """Encode a set-target-volume command in ml, e.g. ``MLT 0.2``."""
    return f"{SET_TARGET_VOLUME} {format_argument(volume)}"


def encode_run(direction: Direction | str | None = Direction.FORWARD) -> str:
    """Encode a run command for the given direction."""
    return REVERSE if Direction.parse(direction) is Direction.REVERSE else RUN
