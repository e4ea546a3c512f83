"""Command-line interface for pumpctl-harvard.

Provides one-shot pump commands and a repeating dispense loop.

Usage:
    # Show pump status
    pumpctl-harvard --port /dev/ttyUSB0 status

    # Show diameter, rate, and volumes
    pumpctl-harvard --config pump.yaml info

    # Dispense 0.2 ml every 10 seconds with a 10 mm syringe at 3 ml/min
    pumpctl-harvard --port COM8 dispense --diameter 10 --rate 3 --units ml/m --step 0.2

    # Stop the pump
    pumpctl-harvard --port COM8 stop
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from pumpctl_core.errors import PumpctlError

from pumpctl_harvard.command import RATE_COMMANDS
from pumpctl_harvard.config import PumpConfig, load_pump_config
from pumpctl_harvard.pump import SUPPORTED_BAUD_RATES, open_pump


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def cmd_status(config: PumpConfig, args: argparse.Namespace) -> int:
    """Print the pump status."""
    with open_pump(config) as pump:
        print(f"Status: {pump.get_status().value}")
    return 0


def cmd_info(config: PumpConfig, args: argparse.Namespace) -> int:
    """Print the pump settings and volumes."""
    with open_pump(config) as pump:
        print(f"Pump on {config.port} at {config.baud_rate} baud")
        print(f"  Diameter: {pump.get_diameter():g} mm")
        print(f"  Rate: {pump.get_rate():g}")
        print(f"  Pumped volume: {pump.get_pumped_volume():g} ml")
        print(f"  Target volume: {pump.get_target_volume():g} ml")
        print(f"  Status: {pump.get_status().value}")
    return 0


def cmd_stop(config: PumpConfig, args: argparse.Namespace) -> int:
    """Stop the pump."""
    with open_pump(config) as pump:
        status = pump.stop()
        print(f"Stopped, status: {status.value}")
    return 0


def cmd_dispense(config: PumpConfig, args: argparse.Namespace) -> int:
    """Dispense ``step`` ml per cycle, extending the target volume each time."""
    with open_pump(config) as pump:
        if not pump.set_diameter(args.diameter):
            print(f"Error: pump rejected diameter {args.diameter} mm")
            return 1
        if not pump.set_rate(args.rate, args.units):
            print(f"Error: pump rejected rate {args.rate} {args.units}")
            return 1
        pump.reset_pumped_volume()

        cycle = 1
        try:
            while args.count == 0 or cycle <= args.count:
                target = args.step * cycle
                if not pump.set_target_volume(target):
                    print(f"Error: pump rejected target volume {target:g} ml")
                    return 1
                status = pump.run()
                print(f"Cycle {cycle}: target {target:g} ml, status {status.value}")
                cycle += 1
                time.sleep(args.interval)
        except KeyboardInterrupt:
            print("\nInterrupted, stopping pump")
            pump.stop()
    return 0


def _build_config(args: argparse.Namespace) -> PumpConfig:
    config = load_pump_config(args.config) if args.config else PumpConfig()
    return config.with_overrides(port=args.port, baud_rate=args.baud)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Harvard Model 22 syringe pump CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", "-c", help="Pump config YAML file")
    parser.add_argument("--port", "-p", help="Serial port (overrides config)")
    parser.add_argument(
        "--baud", type=int, choices=SUPPORTED_BAUD_RATES,
        help="Baud rate configured on the pump (overrides config)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("status", help="Show pump status")
    subparsers.add_parser("info", help="Show diameter, rate, and volumes")
    subparsers.add_parser("stop", help="Stop the pump")

    dispense_parser = subparsers.add_parser("dispense", help="Dispense repeatedly")
    dispense_parser.add_argument(
        "--diameter", type=float, default=10.0,
        help="Syringe diameter in mm (default: 10)"
    )
    dispense_parser.add_argument(
        "--rate", type=float, default=3.0,
        help="Pumping rate (default: 3)"
    )
    dispense_parser.add_argument(
        "--units", choices=sorted(RATE_COMMANDS), default="ml/m",
        help="Rate units (default: ml/m)"
    )
    dispense_parser.add_argument(
        "--step", type=float, default=0.2,
        help="Volume added to the target each cycle in ml (default: 0.2)"
    )
    dispense_parser.add_argument(
        "--interval", type=float, default=10.0,
        help="Seconds between cycles (default: 10)"
    )
    dispense_parser.add_argument(
        "--count", type=int, default=0,
        help="Number of cycles, 0 to run until interrupted (default: 0)"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.debug)

    handlers = {
        "status": cmd_status,
        "info": cmd_info,
        "stop": cmd_stop,
        "dispense": cmd_dispense,
    }

    try:
        config = _build_config(args)
        return handlers[args.command](config, args)
    except (PumpctlError, FileNotFoundError) as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
