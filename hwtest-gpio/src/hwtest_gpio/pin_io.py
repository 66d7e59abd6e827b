"""Reading and writing pin values."""

from __future__ import annotations

from typing import Any

from hwtest_gpio.errors import NotExportedError
from hwtest_gpio.exported import ExportedPinSet
from hwtest_gpio.sysfs import SysfsGpio

HIGH = "1"
LOW = "0"


def encode_value(value: Any) -> str:
    """Normalise a value to the string written to the value file.

    Falsy values and the string "0" are LOW; anything else is HIGH.
    """
    return HIGH if value and value != LOW else LOW


def decode_value(raw: str) -> bool:
    """Return True if the value file contents read HIGH. Empty reads LOW."""
    return (raw.strip() or LOW) == HIGH


class PinIO:
    """Value access gated on the exported pin set.

    Args:
        sysfs: Pin-control filesystem.
        exported: Pins exported by the owning controller.
    """

    def __init__(self, sysfs: SysfsGpio, exported: ExportedPinSet) -> None:
        self._sysfs = sysfs
        self._exported = exported

    async def write(self, pin: str, value: Any) -> None:
        """Drive a pin HIGH or LOW.

        Raises:
            NotExportedError: If the pin is not exported.
            GpioFilesystemError: If the value file cannot be written.
        """
        self._check_exported(pin)
        await self._sysfs.write_value(pin, encode_value(value))

    async def read(self, pin: str) -> bool:
        """Return True if the pin reads HIGH.

        Raises:
            NotExportedError: If the pin is not exported.
            GpioFilesystemError: If the value file cannot be read.
        """
        self._check_exported(pin)
        return decode_value(await self._sysfs.read_value(pin))

    def _check_exported(self, pin: str) -> None:
        if pin not in self._exported:
            raise NotExportedError(f"Pin {pin} has not been exported")
