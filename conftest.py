"""Root conftest.py for the pumpctl monorepo.

This provides shared pytest configuration and fixtures across all packages.
Hardware tests are marked ``integration`` and only run when a pump port is
given with ``--pump-port`` or the ``PUMP_PORT`` environment variable.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser


# Add all package src directories to path for imports
PROJECT_ROOT = Path(__file__).parent
for pkg_dir in PROJECT_ROOT.glob("pumpctl-*/src"):
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


def pytest_addoption(parser: Parser) -> None:
    """Add hardware selection options.

    Args:
        parser: pytest argument parser.
    """
    parser.addoption(
        "--pump-port",
        default=os.environ.get("PUMP_PORT"),
        help="Serial port of a connected Model 22 pump (default: $PUMP_PORT)",
    )
    parser.addoption(
        "--pump-baud",
        type=int,
        default=int(os.environ.get("PUMP_BAUD", "9600")),
        help="Baud rate configured on the pump (default: $PUMP_BAUD or 9600)",
    )


def pytest_configure(config: Config) -> None:
    """Register custom markers.

    Args:
        config: pytest configuration object.
    """
    config.addinivalue_line(
        "markers",
        "integration: Integration test requiring real hardware",
    )
    config.addinivalue_line(
        "markers",
        "slow: Slow-running test",
    )


@pytest.fixture
def pump_port(request: pytest.FixtureRequest) -> str:
    """Serial port of the pump under test; skips when none is configured."""
    port = request.config.getoption("--pump-port")
    if not port:
        pytest.skip("No pump port configured (use --pump-port or PUMP_PORT)")
    return str(port)


@pytest.fixture
def pump_baud(request: pytest.FixtureRequest) -> int:
    """Baud rate configured on the pump under test."""
    return int(request.config.getoption("--pump-baud"))


def pytest_report_header(config: Config) -> list[str]:
    """Add hardware info to pytest header.

    Args:
        config: pytest configuration object.

    Returns:
        List of header lines.
    """
    lines = ["pumpctl monorepo test suite"]

    port = config.getoption("--pump-port")
    if port:
        lines.append(f"Pump hardware: {port} at {config.getoption('--pump-baud')} baud")
    else:
        lines.append("Pump hardware: none (integration tests skipped)")

    # Set by pytest-cov when run with --cov
    if getattr(config.option, "cov_source", None):
        lines.append("Coverage: enabled (see [tool.coverage] in pyproject.toml)")

    return lines
