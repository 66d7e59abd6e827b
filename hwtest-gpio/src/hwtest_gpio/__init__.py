"""Sysfs GPIO channel access for hwtest.

This package exposes the Linux sysfs GPIO interface (``/sys/class/gpio``)
as numbered channels. A channel is either a position on the Raspberry Pi
26-pin header, translated through the pin table of the detected board
revision, or a raw GPIO line number.

Key components:
    - GpioController: Facade owning the numbering mode, revision cache,
      exported pin set and notification subscribers.
    - PinLifecycleManager: Export/direction/watch/unexport state machine.
    - ChannelResolver: Channel to physical pin resolution.
    - RevisionDetector: Board revision detection from /proc/cpuinfo.
    - SysfsGpio: Async access to the pin-control filesystem.

Example:
    from hwtest_gpio import GpioController

    async with GpioController() as gpio:
        await gpio.setup(11, gpio.DIR_OUT)
        await gpio.write(11, True)
        value = await gpio.read(11)
"""

from hwtest_gpio.config import GpioConfig, load_gpio_config
from hwtest_gpio.controller import GpioController, get_default_controller
from hwtest_gpio.errors import (
    GpioError,
    GpioFilesystemError,
    InvalidArgumentError,
    NotExportedError,
    RevisionDetectionError,
    RevisionParseError,
    UnmappedChannelError,
)
from hwtest_gpio.events import NotificationKind, Notifier
from hwtest_gpio.exported import ExportedPinSet
from hwtest_gpio.lifecycle import PinLifecycleManager
from hwtest_gpio.pin_io import PinIO
from hwtest_gpio.pins import PIN_TABLES, RevisionTier, lookup_pin
from hwtest_gpio.resolver import ChannelResolver, NumberingMode, PhysicalPin
from hwtest_gpio.revision import RevisionDetector, classify_revision, parse_revision
from hwtest_gpio.sysfs import Direction, SysfsGpio
from hwtest_gpio.watch import PinWatch

__all__ = [
    # Controller
    "GpioController",
    "get_default_controller",
    # Config
    "GpioConfig",
    "load_gpio_config",
    # Errors
    "GpioError",
    "GpioFilesystemError",
    "InvalidArgumentError",
    "NotExportedError",
    "RevisionDetectionError",
    "RevisionParseError",
    "UnmappedChannelError",
    # Notifications
    "NotificationKind",
    "Notifier",
    # Lifecycle and I/O
    "Direction",
    "ExportedPinSet",
    "PinIO",
    "PinLifecycleManager",
    "PinWatch",
    "SysfsGpio",
    # Resolution
    "ChannelResolver",
    "NumberingMode",
    "PhysicalPin",
    "PIN_TABLES",
    "RevisionDetector",
    "RevisionTier",
    "classify_revision",
    "lookup_pin",
    "parse_revision",
]
