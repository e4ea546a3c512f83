"""Reply framing and decoding for the Harvard Model 22 pump.

Every reply ends in a prompt character that both terminates the frame and
reports the pump state. Query replies carry a value before the prompt; the
real device frames them as ``CR LF value CR LF prompt``::

    "\\r\\n10.000\\r\\n:"   ->  QueryResult(value=10.0, status=STOPPED)
    "\\r\\n>"               ->  QueryResult(value=True, status=FORWARD)
    "\\r\\nOOR\\r\\n:"      ->  QueryResult(value=False, status=STOPPED)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from pumpctl_harvard.errors import PumpDecodeError

TERMINATORS = ":<>*?"
OUT_OF_RANGE = "OOR"
REJECTED = "?"

_WHITESPACE_RE = re.compile(r"\s+")


class PumpStatus(Enum):
    """Pump state reported by the reply prompt."""

    STOPPED = "stopped"
    FORWARD = "forward"
    REVERSE = "reverse"
    STALLED = "stalled"
    UNKNOWN = "unknown"


_STATUS_BY_PROMPT: dict[str, PumpStatus] = {
    ":": PumpStatus.STOPPED,
    ">": PumpStatus.FORWARD,
    "<": PumpStatus.REVERSE,
    "*": PumpStatus.STALLED,
}


@dataclass(frozen=True)
class QueryResult:
    """Decoded reply to one command.

    Attributes:
        value: The numeric payload, ``True`` for a plain acknowledgment, or
            ``False`` when the pump rejected the command or its argument.
        status: Pump state taken from the reply prompt.
    """

    value: float | bool
    status: PumpStatus

    @property
    def succeeded(self) -> bool:
        """True unless the pump rejected the command."""
        return self.value is not False

    @property
    def is_numeric(self) -> bool:
        """True if the reply carried a numeric payload."""
        return not isinstance(self.value, bool)


def parse_status(code: str) -> PumpStatus:
    """Map the last character of *code* to a :class:`PumpStatus`.

    Unmapped characters (including ``?``) and empty input give
    :attr:`PumpStatus.UNKNOWN`.
    """
    return _STATUS_BY_PROMPT.get(code[-1:], PumpStatus.UNKNOWN)


def is_terminated(text: str) -> bool:
    """Return True if *text* ends with a prompt character."""
    return bool(text) and text[-1] in TERMINATORS


def split_frame(text: str) -> list[str]:
    """Split a reply on runs of whitespace.

    A frame starting with whitespace yields a leading empty token, so the
    device's ``CR LF value CR LF prompt`` framing splits into three tokens.
    """
    return _WHITESPACE_RE.split(text)


def parse_response(text: str) -> QueryResult:
    """Decode a complete reply frame.

    Args:
        text: Accumulated reply text, ending in a prompt character.

    Returns:
        The decoded value and pump status.

    Raises:
        PumpDecodeError: If a three-token reply carries a payload that is
            neither ``OOR`` nor a number.
    """
    tokens = split_frame(text)
    status = parse_status(tokens[-1])

    if OUT_OF_RANGE in tokens[:-1] or text.endswith(REJECTED):
        return QueryResult(value=False, status=status)

    if len(tokens) == 3:
        payload = tokens[1]
        try:
            value = float(payload)
        except ValueError:
            raise PumpDecodeError(f"Invalid numeric payload {payload!r} in reply {text!r}") from None
        return QueryResult(value=value, status=status)

    return QueryResult(value=True, status=status)
