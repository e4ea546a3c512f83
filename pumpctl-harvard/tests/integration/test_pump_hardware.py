"""Integration tests against a connected Harvard Model 22 pump.

Hardware Setup:
    Pump RS-232 port → host serial adapter (null modem not required)
    Pump baud rate set from the front panel to match --pump-baud
    A syringe may be loaded; the tests dispense at most 0.05 ml.

Run with:
    pytest pumpctl-harvard/tests/integration --pump-port /dev/ttyUSB0
"""

from __future__ import annotations

import logging
import time
from typing import Generator

import pytest

from pumpctl_harvard import PumpStatus, SyringePump, create_instrument

logger = logging.getLogger(__name__)

pytestmark = pytest.mark.integration

SYRINGE_DIAMETER = 10.0  # mm
TEST_RATE = 1.0  # ml/min
TEST_VOLUME = 0.05  # ml


@pytest.fixture
def pump(pump_port: str, pump_baud: int) -> Generator[SyringePump, None, None]:
    """Connected pump, stopped and closed after each test."""
    instrument = create_instrument(pump_port, pump_baud)
    try:
        yield instrument
    finally:
        try:
            instrument.stop()
        finally:
            instrument.close()


class TestPumpHardware:
    """Round trips against real hardware."""

    def test_status_is_known(self, pump: SyringePump) -> None:
        assert pump.get_status() is not PumpStatus.UNKNOWN

    def test_set_and_read_diameter(self, pump: SyringePump) -> None:
        assert pump.set_diameter(SYRINGE_DIAMETER)
        assert pump.get_diameter() == pytest.approx(SYRINGE_DIAMETER, abs=0.01)

    def test_set_rate(self, pump: SyringePump) -> None:
        assert pump.set_diameter(SYRINGE_DIAMETER)
        assert pump.set_rate(TEST_RATE, "ml/m")
        assert pump.get_rate() == pytest.approx(TEST_RATE, rel=0.01)

    def test_out_of_range_diameter_rejected(self, pump: SyringePump) -> None:
        assert pump.set_diameter(999) is False

    @pytest.mark.slow
    def test_dispense_target_volume(self, pump: SyringePump) -> None:
        assert pump.set_diameter(SYRINGE_DIAMETER)
        assert pump.set_rate(TEST_RATE, "ml/m")
        pump.reset_pumped_volume()
        assert pump.set_target_volume(TEST_VOLUME)
        assert pump.run() is PumpStatus.FORWARD

        deadline = time.monotonic() + 10.0
        while pump.get_status() is PumpStatus.FORWARD and time.monotonic() < deadline:
            time.sleep(0.5)

        volume = pump.get_pumped_volume()
        logger.info("Dispensed %.4f ml", volume)
        assert pump.last_status is PumpStatus.STOPPED
        assert volume == pytest.approx(TEST_VOLUME, abs=0.005)
