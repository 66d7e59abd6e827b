"""Polling change watch on a pin value file."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from hwtest_gpio.errors import GpioError
from hwtest_gpio.sysfs import SysfsGpio

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], Awaitable[None]]


class PinWatch:
    """Background task that calls back when a pin's value file changes.

    The value file is polled every ``interval`` seconds. The callback runs
    inside the watch task, so cancelling the watch also stops a callback
    that is still in progress.

    Args:
        sysfs: Pin-control filesystem.
        pin: Physical pin to watch.
        callback: Coroutine function invoked after each value transition.
        interval: Poll interval in seconds.
    """

    def __init__(
        self,
        sysfs: SysfsGpio,
        pin: str,
        callback: ChangeCallback,
        interval: float,
    ) -> None:
        self._sysfs = sysfs
        self._pin = pin
        self._callback = callback
        self._interval = interval
        self._active = False
        self._task: asyncio.Task[None] | None = None

    @property
    def pin(self) -> str:
        """Physical pin being watched."""
        return self._pin

    @property
    def is_active(self) -> bool:
        """Return True until the watch is cancelled."""
        return self._active

    def start(self) -> None:
        """Start polling. Must be called from a running event loop."""
        if self._task is not None:
            return
        self._active = True
        self._task = asyncio.create_task(self._poll_loop())

    def cancel(self) -> None:
        """Stop the watch. No callback starts after this returns."""
        self._active = False
        if self._task is not None:
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait for a cancelled watch task to finish.

        Never raises. A watch task that died on its own is logged, so that
        the caller can go on to unexport the pin.
        """
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception:  # pylint: disable=broad-exception-caught
            logger.warning("Watch on pin %s had failed", self._pin, exc_info=True)
        self._task = None

    async def _poll_loop(self) -> None:
        last: str | None = None
        while self._active:
            try:
                current = (await self._sysfs.read_value(self._pin)).strip()
            except GpioError as exc:
                logger.debug("Watch on pin %s could not read value: %s", self._pin, exc)
            else:
                if last is not None and current != last and self._active:
                    try:
                        await self._callback()
                    except asyncio.CancelledError:
                        raise
                    except Exception:  # pylint: disable=broad-exception-caught
                        logger.warning("Change callback for pin %s failed", self._pin, exc_info=True)
                last = current

            await asyncio.sleep(self._interval)
