"""Tests for the Harvard Model 22 pump emulator."""

from __future__ import annotations

import pytest

from pumpctl_core.errors import TransportError

from pumpctl_harvard.emulator import Pump22Emulator, Pump22EmulatorConfig, make_pump22_emulator
from pumpctl_harvard.response import PumpStatus

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _exchange(emu: Pump22Emulator, cmd: str) -> str:
    """Send a CR-terminated command and return everything the emulator replies."""
    emu.write(f"{cmd}\r".encode("ascii"))
    return emu.read_available(emu.bytes_available()).decode("ascii")


# ---------------------------------------------------------------------------
# TestPump22EmulatorConfig
# ---------------------------------------------------------------------------


class TestPump22EmulatorConfig:
    """Tests for Pump22EmulatorConfig validation."""

    def test_defaults(self) -> None:
        config = Pump22EmulatorConfig()
        assert config.baud_rate == 9600
        assert config.max_diameter == 35.0
        assert config.chunk_size == 0

    def test_frozen(self) -> None:
        config = Pump22EmulatorConfig()
        with pytest.raises(AttributeError):
            config.baud_rate = 1200  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("baud_rate", 0),
            ("min_diameter", 0.0),
            ("max_rate", -1.0),
            ("max_volume", 0.0),
            ("chunk_size", -1),
        ],
    )
    def test_invalid_values_raise(self, field: str, value: float) -> None:
        with pytest.raises(ValueError, match=field):
            Pump22EmulatorConfig(**{field: value})

    def test_max_below_min_diameter_raises(self) -> None:
        with pytest.raises(ValueError, match="max_diameter"):
            Pump22EmulatorConfig(min_diameter=5.0, max_diameter=1.0)

    def test_factory_overrides(self) -> None:
        emu = make_pump22_emulator(baud_rate=2400)
        assert emu.baud_rate == 2400


# ---------------------------------------------------------------------------
# Framing
# ---------------------------------------------------------------------------


class TestFraming:
    """Tests for reply framing."""

    def test_status_query(self) -> None:
        assert _exchange(make_pump22_emulator(), "") == "\r\n:"

    def test_value_reply(self) -> None:
        assert _exchange(make_pump22_emulator(), "DIA") == "\r\n10.0000\r\n:"

    def test_unknown_command(self) -> None:
        assert _exchange(make_pump22_emulator(), "XYZ") == "\r\n?"

    def test_set_command_without_argument(self) -> None:
        assert _exchange(make_pump22_emulator(), "MLT") == "\r\n?"

    def test_non_numeric_argument(self) -> None:
        assert _exchange(make_pump22_emulator(), "MMD abc") == "\r\n?"

    def test_lowercase_accepted(self) -> None:
        assert _exchange(make_pump22_emulator(), "run") == "\r\n>"

    def test_no_reply_before_carriage_return(self) -> None:
        emu = make_pump22_emulator()
        emu.write(b"DI")
        assert emu.bytes_available() == 0
        assert emu.written == []
        emu.write(b"A\r")
        assert emu.written == ["DIA"]
        assert emu.bytes_available() == len("\r\n10.0000\r\n:")

    def test_multiple_commands_in_one_write(self) -> None:
        emu = make_pump22_emulator()
        emu.write(b"RUN\rSTP\r")
        assert emu.written == ["RUN", "STP"]
        assert emu.read_available(64) == b""
        assert emu.read_available(emu.bytes_available()) == b"\r\n>\r\n:"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestCommands:
    """Tests for command execution."""

    def test_set_diameter(self) -> None:
        emu = make_pump22_emulator()
        assert _exchange(emu, "MMD 20") == "\r\n:"
        assert _exchange(emu, "DIA") == "\r\n20.0000\r\n:"

    def test_diameter_out_of_range(self) -> None:
        emu = make_pump22_emulator()
        assert _exchange(emu, "MMD 50") == "\r\nOOR\r\n:"
        assert _exchange(emu, "DIA") == "\r\n10.0000\r\n:"

    def test_run_and_stop(self) -> None:
        emu = make_pump22_emulator()
        assert _exchange(emu, "RUN") == "\r\n>"
        assert emu.status is PumpStatus.FORWARD
        assert _exchange(emu, "REV") == "\r\n<"
        assert _exchange(emu, "STP") == "\r\n:"
        assert emu.status is PumpStatus.STOPPED

    def test_prompt_follows_state(self) -> None:
        emu = make_pump22_emulator()
        _exchange(emu, "RUN")
        assert _exchange(emu, "RAT") == "\r\n1.0000\r\n>"

    @pytest.mark.parametrize(
        ("cmd", "expected"),
        [
            ("MLM3", "MLM"),
            ("MLH 600", "MLH"),
            ("ULM250", "ULM"),
            ("ULH 600", "ULH"),
        ],
    )
    def test_rate_commands(self, cmd: str, expected: str) -> None:
        emu = make_pump22_emulator()
        assert _exchange(emu, cmd) == "\r\n:"
        assert emu.rate_command == expected

    def test_rate_out_of_range(self) -> None:
        emu = make_pump22_emulator()
        assert _exchange(emu, "MLM100") == "\r\nOOR\r\n:"
        assert emu.rate_command == "MLM"
        assert _exchange(emu, "RAT") == "\r\n1.0000\r\n:"

    def test_target_volume(self) -> None:
        emu = make_pump22_emulator()
        assert _exchange(emu, "MLT 0.2") == "\r\n:"
        assert _exchange(emu, "TAR") == "\r\n0.2000\r\n:"
        assert _exchange(emu, "CLT") == "\r\n:"
        assert _exchange(emu, "TAR") == "\r\n0.0000\r\n:"

    def test_zero_target_volume_out_of_range(self) -> None:
        assert _exchange(make_pump22_emulator(), "MLT 0") == "\r\nOOR\r\n:"


# ---------------------------------------------------------------------------
# Volume simulation
# ---------------------------------------------------------------------------


class TestDispense:
    """Tests for the pumped volume simulation."""

    def test_not_running_is_noop(self) -> None:
        emu = make_pump22_emulator()
        emu.dispense(1.0)
        assert _exchange(emu, "VOL") == "\r\n0.0000\r\n:"

    def test_accumulates_while_running(self) -> None:
        emu = make_pump22_emulator()
        _exchange(emu, "RUN")
        emu.dispense(0.25)
        emu.dispense(0.25)
        assert _exchange(emu, "VOL") == "\r\n0.5000\r\n>"

    def test_stops_at_target(self) -> None:
        emu = make_pump22_emulator()
        _exchange(emu, "MLT 0.2")
        _exchange(emu, "RUN")
        emu.dispense(1.0)
        assert emu.status is PumpStatus.STOPPED
        assert _exchange(emu, "VOL") == "\r\n0.2000\r\n:"

    def test_clear_volume(self) -> None:
        emu = make_pump22_emulator()
        _exchange(emu, "RUN")
        emu.dispense(0.3)
        assert _exchange(emu, "CLV") == "\r\n>"
        assert _exchange(emu, "VOL") == "\r\n0.0000\r\n>"

    def test_stall(self) -> None:
        emu = make_pump22_emulator()
        _exchange(emu, "RUN")
        emu.stall()
        assert _exchange(emu, "") == "\r\n*"
        assert _exchange(emu, "RUN") == "\r\n>"


# ---------------------------------------------------------------------------
# Transport behavior
# ---------------------------------------------------------------------------


class TestTransport:
    """Tests for the SerialTransport surface and fault injection."""

    def test_chunked_reveal(self) -> None:
        emu = make_pump22_emulator(chunk_size=4)
        emu.write(b"DIA\r")
        assert emu.bytes_available() == 4
        assert emu.read_available(64) == b"\r\n10"
        assert emu.bytes_available() == 4
        assert emu.bytes_available() == 8

    def test_flush_input(self) -> None:
        emu = make_pump22_emulator()
        emu.write(b"DIA\r")
        emu.flush_input()
        assert emu.bytes_available() == 0

    def test_mute(self) -> None:
        emu = make_pump22_emulator()
        emu.mute = True
        emu.write(b"RUN\r")
        assert emu.bytes_available() == 0
        assert emu.status is PumpStatus.FORWARD

    def test_drop_terminator(self) -> None:
        emu = make_pump22_emulator()
        emu.drop_terminator = True
        assert _exchange(emu, "DIA") == "\r\n10.0000\r\n"

    def test_inject_reply(self) -> None:
        emu = make_pump22_emulator()
        emu.inject_reply("MLT 0.2 OOR :")
        assert _exchange(emu, "MLT 0.2") == "MLT 0.2 OOR :"
        assert _exchange(emu, "") == "\r\n:"

    def test_written_records_commands(self) -> None:
        emu = make_pump22_emulator()
        _exchange(emu, "")
        _exchange(emu, "MMD 10")
        assert emu.written == ["", "MMD 10"]

    def test_close(self) -> None:
        emu = make_pump22_emulator()
        emu.close()
        assert not emu.is_open
        assert emu.close_count == 1

    def test_write_after_close_raises(self) -> None:
        emu = make_pump22_emulator()
        emu.close()
        with pytest.raises(TransportError, match="closed"):
            emu.write(b"\r")
