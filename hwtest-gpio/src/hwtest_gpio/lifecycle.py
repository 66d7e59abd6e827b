"""Export lifecycle of GPIO pins.

Each physical pin is either unmanaged or exported by this controller:

    Unmanaged --setup--> Exported --unexport/destroy--> Unmanaged

setup() always leaves the pin freshly exported. A pin the kernel already
exposes (for example, left over from a crashed run) is unexported first,
so its direction and watch are never inherited from stale state.

A failure part-way through setup() is raised to the caller. Filesystem steps
that already succeeded are not rolled back, and the pin is not recorded as
exported; retry setup() or unexport the pin.

A failed unexport leaves the pin recorded as exported, without its watch,
so a later destroy() tries it again.
"""

from __future__ import annotations

import logging

from hwtest_gpio.errors import GpioError, GpioFilesystemError, InvalidArgumentError
from hwtest_gpio.events import NotificationKind, Notifier
from hwtest_gpio.exported import ExportedPinSet
from hwtest_gpio.pin_io import PinIO
from hwtest_gpio.resolver import Channel, ChannelResolver, NumberingMode, PhysicalPin, check_channel
from hwtest_gpio.sysfs import Direction, SysfsGpio
from hwtest_gpio.watch import PinWatch

logger = logging.getLogger(__name__)


def parse_direction(direction: Direction | str) -> Direction:
    """Return the Direction for an enum member or its string value.

    Raises:
        InvalidArgumentError: If the value is not "in" or "out".
    """
    if isinstance(direction, Direction):
        return direction
    try:
        return Direction(direction)
    except ValueError as exc:
        raise InvalidArgumentError("Cannot set invalid direction") from exc


class PinLifecycleManager:
    """Exports, configures, watches and unexports pins.

    Args:
        sysfs: Pin-control filesystem.
        resolver: Channel resolver.
        exported: Exported pin set, mutated only by this manager.
        pin_io: Value access used by change watches.
        notifier: Receives export and change notifications.
        poll_interval: Change watch poll interval in seconds.
    """

    def __init__(
        self,
        sysfs: SysfsGpio,
        resolver: ChannelResolver,
        exported: ExportedPinSet,
        pin_io: PinIO,
        notifier: Notifier,
        poll_interval: float,
    ) -> None:
        self._sysfs = sysfs
        self._resolver = resolver
        self._exported = exported
        self._pin_io = pin_io
        self._notifier = notifier
        self._poll_interval = poll_interval
        self._watches: dict[str, PinWatch] = {}

    @property
    def watched_pins(self) -> list[str]:
        """Pins with an active change watch."""
        return list(self._watches)

    async def setup(
        self,
        channel: Channel,
        direction: Direction | str,
        mode: NumberingMode,
    ) -> PhysicalPin:
        """Export a channel's pin and configure its direction.

        Args:
            channel: Channel in the given numbering mode.
            direction: Pin direction.
            mode: Numbering mode to resolve the channel in.

        Returns:
            The exported physical pin.

        Raises:
            InvalidArgumentError: If the channel or direction is invalid.
            UnmappedChannelError: If the channel has no pin.
            RevisionDetectionError: If the board revision cannot be read.
            GpioFilesystemError: If any filesystem step fails.
        """
        check_channel(channel)
        pin_direction = parse_direction(direction)

        pin = await self._resolver.resolve(channel, mode)

        # A watch left from an earlier setup must not survive the re-export.
        await self._drop_watch(pin)

        if await self._sysfs.is_exported(pin):
            logger.debug("Pin %s already exported, unexporting first", pin)
            await self.unexport(pin)

        await self._sysfs.export(pin)
        await self._sysfs.set_direction(pin, pin_direction)

        watch = PinWatch(
            self._sysfs,
            pin,
            lambda: self._on_value_change(channel, pin),
            self._poll_interval,
        )
        watch.start()
        self._watches[pin] = watch

        self._exported.add(pin)
        logger.debug("Channel %s exported as pin %s (%s)", channel, pin, pin_direction.value)
        self._notifier.emit(NotificationKind.EXPORT, channel)
        return pin

    async def unexport(self, pin: str) -> None:
        """Stop watching a pin and unexport it.

        The watch is cancelled before the unexport is written, so no change
        notification for the pin fires after this returns. The pin stays in
        the exported set until the unexport write succeeds.

        Raises:
            GpioFilesystemError: If the unexport write fails.
        """
        watch = self._watches.pop(pin, None)
        if watch is not None:
            watch.cancel()
            await watch.wait_closed()
        await self._sysfs.unexport(pin)
        self._exported.discard(pin)

    async def destroy(self) -> None:
        """Unexport every pin exported by this manager.

        Pins are processed in reverse insertion order. A failure on one pin
        does not stop the others; the first failure is raised once every
        pin has been attempted.

        Raises:
            GpioFilesystemError: If any unexport failed.
        """
        pins = self._exported.pins()
        failures: list[GpioError] = []
        for pin in reversed(pins):
            try:
                await self.unexport(pin)
            except GpioError as exc:
                logger.warning("Failed to unexport pin %s: %s", pin, exc)
                failures.append(exc)

        if pins:
            logger.info("Unexported %d of %d pins", len(pins) - len(failures), len(pins))
        if failures:
            raise GpioFilesystemError(
                f"Failed to unexport {len(failures)} of {len(pins)} pins: {failures[0]}"
            ) from failures[0]

    def reset(self) -> None:
        """Cancel every watch and forget all pins without touching the filesystem."""
        for watch in self._watches.values():
            watch.cancel()
        self._watches.clear()
        self._exported.clear()

    async def _drop_watch(self, pin: str) -> None:
        watch = self._watches.pop(pin, None)
        if watch is not None:
            watch.cancel()
            await watch.wait_closed()

    async def _on_value_change(self, channel: Channel, pin: str) -> None:
        try:
            value = await self._pin_io.read(pin)
        except GpioError as exc:
            logger.warning("Failed to read channel %s after value change: %s", channel, exc)
            return
        self._notifier.emit(NotificationKind.CHANGE, channel, value)
