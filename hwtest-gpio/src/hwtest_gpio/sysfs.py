"""Async access to the Linux sysfs GPIO interface.

Layout under the root directory (``/sys/class/gpio`` by default):

    export              write a pin number to create gpio<N>/
    unexport            write a pin number to remove gpio<N>/
    gpio<N>/direction   "in" or "out"
    gpio<N>/value       "0" or "1"

Every operation runs the blocking file access in the default executor and
re-raises OSError as GpioFilesystemError.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, TypeVar

from hwtest_gpio.errors import GpioFilesystemError

logger = logging.getLogger(__name__)

DEFAULT_SYSFS_ROOT = Path("/sys/class/gpio")

_T = TypeVar("_T")


class Direction(Enum):
    """GPIO pin direction as written to the direction file."""

    IN = "in"
    OUT = "out"


class SysfsGpio:
    """Pin-control filesystem rooted at a sysfs GPIO directory.

    The kernel provides no locking: concurrent writers to the same pin,
    in this process or another, are not guarded against.

    Args:
        root: Root of the GPIO class directory.
    """

    def __init__(self, root: str | Path = DEFAULT_SYSFS_ROOT) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """Root directory of the pin-control filesystem."""
        return self._root

    def pin_dir(self, pin: str) -> Path:
        """Return the per-pin directory created by export."""
        return self._root / f"gpio{pin}"

    def value_path(self, pin: str) -> Path:
        """Return the value file of an exported pin."""
        return self.pin_dir(pin) / "value"

    async def export(self, pin: str) -> None:
        """Export a pin, creating its gpio<N> directory."""
        logger.debug("Exporting pin %s", pin)
        await self._run(f"export pin {pin}", self._write, self._root / "export", pin)

    async def unexport(self, pin: str) -> None:
        """Unexport a pin, removing its gpio<N> directory."""
        logger.debug("Unexporting pin %s", pin)
        await self._run(f"unexport pin {pin}", self._write, self._root / "unexport", pin)

    async def is_exported(self, pin: str) -> bool:
        """Return True if the kernel currently exposes the pin directory."""
        return await self._run(f"check pin {pin}", self.pin_dir(pin).is_dir)

    async def set_direction(self, pin: str, direction: Direction) -> None:
        """Write the pin direction."""
        logger.debug("Setting pin %s direction to %s", pin, direction.value)
        await self._run(
            f"set direction of pin {pin}",
            self._write,
            self.pin_dir(pin) / "direction",
            direction.value,
        )

    async def read_value(self, pin: str) -> str:
        """Return the raw contents of the pin value file."""
        return await self._run(f"read pin {pin}", self._read, self.value_path(pin))

    async def write_value(self, pin: str, value: str) -> None:
        """Write a raw string to the pin value file."""
        await self._run(f"write pin {pin}", self._write, self.value_path(pin), value)

    async def _run(self, action: str, func: Callable[..., _T], *args: Any) -> _T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, func, *args)
        except (OSError, UnicodeError) as exc:
            raise GpioFilesystemError(f"Failed to {action}: {exc}") from exc

    @staticmethod
    def _write(path: Path, value: str) -> None:
        with open(path, "w", encoding="ascii") as f:
            f.write(value)

    @staticmethod
    def _read(path: Path) -> str:
        with open(path, encoding="ascii") as f:
            return f.read()
