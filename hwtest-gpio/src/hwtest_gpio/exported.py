"""Bookkeeping of the pins exported by one controller."""

from __future__ import annotations

from typing import Iterator


class ExportedPinSet:
    """Tracks which physical pins this controller has exported.

    Pins are kept in insertion order. A pin counts as exported only while
    its flag is True. Only the lifecycle manager mutates the set.
    """

    def __init__(self) -> None:
        self._pins: dict[str, bool] = {}

    def __contains__(self, pin: object) -> bool:
        if not isinstance(pin, str):
            return False
        return self._pins.get(pin, False)

    def __iter__(self) -> Iterator[str]:
        return iter(self.pins())

    def __len__(self) -> int:
        return len(self.pins())

    def add(self, pin: str) -> None:
        """Mark a pin as exported."""
        # Re-adding moves the pin to the end of the insertion order.
        self._pins.pop(pin, None)
        self._pins[pin] = True

    def discard(self, pin: str) -> None:
        """Forget a pin; no-op if it is not present."""
        self._pins.pop(pin, None)

    def pins(self) -> list[str]:
        """Return exported pins in insertion order."""
        return [pin for pin, exported in self._pins.items() if exported]

    def clear(self) -> None:
        """Forget every pin."""
        self._pins.clear()
