"""GPIO controller facade.

The controller owns all per-process GPIO state: the numbering mode, the
cached board revision, the exported pin set and the notification
subscribers. Use one controller per process; two controllers driving the
same pins would race on the kernel interface.

Example:
    async with GpioController() as gpio:
        gpio.set_mode(GpioController.MODE_RPI)
        gpio.subscribe("change", lambda channel, value: print(channel, value))
        await gpio.setup(11, GpioController.DIR_OUT)
        await gpio.write(11, True)
        assert await gpio.read(11)
"""

from __future__ import annotations

import logging
from typing import Any

from hwtest_gpio.config import GpioConfig
from hwtest_gpio.events import NotificationKind, Notifier, Subscriber
from hwtest_gpio.exported import ExportedPinSet
from hwtest_gpio.lifecycle import PinLifecycleManager
from hwtest_gpio.pin_io import PinIO
from hwtest_gpio.pins import RevisionTier
from hwtest_gpio.resolver import Channel, ChannelResolver, NumberingMode, PhysicalPin, parse_mode
from hwtest_gpio.revision import RevisionDetector
from hwtest_gpio.sysfs import Direction, SysfsGpio

logger = logging.getLogger(__name__)


class GpioController:
    """Channel-level access to sysfs GPIO pins.

    Args:
        config: Controller settings. Defaults to GpioConfig().
        sysfs: Pin-control filesystem. Defaults to one rooted at
            config.sysfs_root.
    """

    DIR_IN = Direction.IN
    DIR_OUT = Direction.OUT
    MODE_RPI = NumberingMode.LOGICAL
    MODE_BCM = NumberingMode.PHYSICAL

    def __init__(
        self,
        config: GpioConfig | None = None,
        *,
        sysfs: SysfsGpio | None = None,
    ) -> None:
        self._config = config or GpioConfig()
        self._sysfs = sysfs or SysfsGpio(self._config.sysfs_root)
        self._mode = self._config.mode
        self._detector = RevisionDetector(self._config.cpuinfo_path)
        self._resolver = ChannelResolver(self._detector)
        self._exported = ExportedPinSet()
        self._notifier = Notifier()
        self._pin_io = PinIO(self._sysfs, self._exported)
        self._lifecycle = PinLifecycleManager(
            self._sysfs,
            self._resolver,
            self._exported,
            self._pin_io,
            self._notifier,
            self._config.poll_interval,
        )

    @property
    def config(self) -> GpioConfig:
        """Controller settings."""
        return self._config

    @property
    def mode(self) -> NumberingMode:
        """Current numbering mode."""
        return self._mode

    @property
    def revision(self) -> RevisionTier | None:
        """Detected board revision tier, or None before first detection."""
        return self._detector.tier

    @property
    def revision_code(self) -> str | None:
        """Revision code behind the detected tier."""
        return self._detector.code

    @property
    def exported_pins(self) -> list[str]:
        """Physical pins currently exported by this controller."""
        return self._exported.pins()

    def subscribe(self, kind: NotificationKind | str, callback: Subscriber) -> None:
        """Register a callback for "modeChange", "export" or "change" notifications."""
        self._notifier.subscribe(kind, callback)

    def unsubscribe(self, kind: NotificationKind | str, callback: Subscriber) -> None:
        """Remove a callback registered with subscribe()."""
        self._notifier.unsubscribe(kind, callback)

    def set_mode(self, mode: NumberingMode | str) -> None:
        """Set the numbering mode for subsequent channel resolution.

        Pins that are already exported are not affected.

        Raises:
            InvalidArgumentError: If mode is not MODE_RPI or MODE_BCM.
        """
        self._mode = parse_mode(mode)
        logger.debug("Numbering mode set to %s", self._mode.value)
        self._notifier.emit(NotificationKind.MODE_CHANGE, self._mode)

    async def detect_revision(self) -> RevisionTier:
        """Detect (or return the cached) board revision tier."""
        return await self._detector.detect()

    async def resolve(self, channel: Channel) -> PhysicalPin:
        """Resolve a channel in the current numbering mode."""
        return await self._resolver.resolve(channel, self._mode)

    async def setup(self, channel: Channel, direction: Direction | str = Direction.OUT) -> None:
        """Set up a channel for use as an input or output.

        Setting up a channel that is already exported re-exports it.

        Args:
            channel: Channel in the current numbering mode.
            direction: DIR_IN or DIR_OUT (default).

        Raises:
            InvalidArgumentError: If the channel or direction is invalid.
            UnmappedChannelError: If the channel has no pin.
            RevisionDetectionError: If the board revision cannot be read.
            GpioFilesystemError: If a filesystem step fails.
        """
        await self._lifecycle.setup(channel, direction, self._mode)

    async def write(self, channel: Channel, value: Any) -> None:
        """Write a value to a channel.

        Args:
            channel: Channel in the current numbering mode.
            value: Truthy (other than "0") drives the pin high, else low.

        Raises:
            NotExportedError: If the channel has not been set up.
            GpioFilesystemError: If the value file cannot be written.
        """
        pin = await self.resolve(channel)
        await self._pin_io.write(pin, value)

    output = write

    async def read(self, channel: Channel) -> bool:
        """Read the value of a channel.

        Raises:
            NotExportedError: If the channel has not been set up.
            GpioFilesystemError: If the value file cannot be read.
        """
        pin = await self.resolve(channel)
        return await self._pin_io.read(pin)

    input = read

    async def unexport(self, channel: Channel) -> None:
        """Stop watching a channel and unexport its pin.

        Also cleans up after a setup() that failed part-way, when the pin
        is exported in the kernel but not recorded by this controller.

        Raises:
            GpioFilesystemError: If the unexport write fails.
        """
        pin = await self.resolve(channel)
        await self._lifecycle.unexport(pin)

    async def destroy(self) -> None:
        """Unexport every pin exported by this controller.

        Returns once all pins have been processed.

        Raises:
            GpioFilesystemError: If any pin failed to unexport.
        """
        await self._lifecycle.destroy()

    def reset(self) -> None:
        """Return the controller to its initial state.

        Forgets exported pins without unexporting them, removes all
        subscribers, clears the cached revision and returns to board-header
        numbering (MODE_RPI), whatever mode the config started in.
        """
        self._lifecycle.reset()
        self._notifier.clear()
        self._detector.clear()
        self._mode = NumberingMode.LOGICAL

    async def __aenter__(self) -> GpioController:
        """Enter async context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context, unexporting every pin."""
        await self.destroy()


_default_controller: GpioController | None = None


def get_default_controller() -> GpioController:
    """Return the process-wide shared controller, creating it on first use."""
    global _default_controller  # pylint: disable=global-statement
    if _default_controller is None:
        _default_controller = GpioController()
    return _default_controller
