"""Command-line interface for hwtest-gpio.

Usage:
    # Show the detected board revision
    hwtest-gpio revision

    # Show which GPIO line header pin 11 is wired to
    hwtest-gpio resolve 11

    # Read header pin 11, or GPIO17 in chip numbering
    hwtest-gpio read 11
    hwtest-gpio --mode bcm read 17

    # Drive header pin 11 high for two seconds
    hwtest-gpio write 11 1 --hold 2

    # Print value changes on header pin 11 for ten seconds
    hwtest-gpio watch 11 --duration 10
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from hwtest_gpio.config import GpioConfig, load_gpio_config, parse_mode_name
from hwtest_gpio.controller import GpioController
from hwtest_gpio.errors import GpioError
from hwtest_gpio.events import NotificationKind
from hwtest_gpio.sysfs import Direction


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_controller(args: argparse.Namespace) -> GpioController:
    """Create a controller from the --config and --mode options."""
    config = load_gpio_config(args.config) if args.config else GpioConfig()
    controller = GpioController(config)
    if args.mode:
        controller.set_mode(parse_mode_name(args.mode))
    return controller


async def cmd_revision(gpio: GpioController, args: argparse.Namespace) -> int:
    """Print the detected board revision tier."""
    tier = await gpio.detect_revision()
    print(f"{tier.value} (revision {gpio.revision_code})")
    return 0


async def cmd_resolve(gpio: GpioController, args: argparse.Namespace) -> int:
    """Print the physical pin for a channel."""
    pin = await gpio.resolve(args.channel)
    print(pin)
    return 0


async def cmd_read(gpio: GpioController, args: argparse.Namespace) -> int:
    """Set a channel up as input and print its value."""
    async with gpio:
        await gpio.setup(args.channel, Direction.IN)
        value = await gpio.read(args.channel)
    print("1" if value else "0")
    return 0


async def cmd_write(gpio: GpioController, args: argparse.Namespace) -> int:
    """Set a channel up as output and drive it."""
    async with gpio:
        await gpio.setup(args.channel, Direction.OUT)
        await gpio.write(args.channel, args.value)
        if args.hold > 0:
            await asyncio.sleep(args.hold)
    return 0


async def cmd_watch(gpio: GpioController, args: argparse.Namespace) -> int:
    """Print value changes on a channel until the duration elapses."""

    def on_change(channel: int, value: bool) -> None:
        print(f"{channel}: {'1' if value else '0'}", flush=True)

    gpio.subscribe(NotificationKind.CHANGE, on_change)
    async with gpio:
        await gpio.setup(args.channel, Direction.IN)
        await asyncio.sleep(args.duration)
    return 0


COMMANDS = {
    "revision": cmd_revision,
    "resolve": cmd_resolve,
    "read": cmd_read,
    "write": cmd_write,
    "watch": cmd_watch,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="hwtest sysfs GPIO CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", "-c", help="GPIO config YAML file")
    parser.add_argument(
        "--mode", choices=["board", "bcm"],
        help="Channel numbering (default: board header, or as configured)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("revision", help="Show the detected board revision")

    resolve_parser = subparsers.add_parser("resolve", help="Show the GPIO pin for a channel")
    resolve_parser.add_argument("channel", type=int, help="Channel number")

    read_parser = subparsers.add_parser("read", help="Read a channel")
    read_parser.add_argument("channel", type=int, help="Channel number")

    write_parser = subparsers.add_parser("write", help="Write a channel")
    write_parser.add_argument("channel", type=int, help="Channel number")
    write_parser.add_argument("value", choices=["0", "1"], help="Value to write")
    write_parser.add_argument(
        "--hold", type=float, default=0.0,
        help="Seconds to keep the pin exported after writing (default: 0)"
    )

    watch_parser = subparsers.add_parser("watch", help="Print value changes on a channel")
    watch_parser.add_argument("channel", type=int, help="Channel number")
    watch_parser.add_argument(
        "--duration", type=float, default=10.0,
        help="Seconds to watch for (default: 10)"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.debug)

    try:
        gpio = build_controller(args)
        return asyncio.run(COMMANDS[args.command](gpio, args))
    except (GpioError, FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
