"""Channel number to physical pin resolution."""

from __future__ import annotations

import logging
from enum import Enum
from typing import NewType, Union

from hwtest_gpio.errors import InvalidArgumentError, UnmappedChannelError
from hwtest_gpio.pins import lookup_pin
from hwtest_gpio.revision import RevisionDetector

logger = logging.getLogger(__name__)

PhysicalPin = NewType("PhysicalPin", str)
"""GPIO pin identifier as written to the export/unexport control files."""

Channel = Union[int, str]
"""Caller-facing channel number in the current numbering mode."""


class NumberingMode(Enum):
    """How caller channel numbers are interpreted.

    Attributes:
        LOGICAL: Board-header position, translated through the pin table
            of the detected board revision. This is the default.
        PHYSICAL: GPIO line number, passed through unchanged.
    """

    LOGICAL = "mode_rpi"
    PHYSICAL = "mode_bcm"


def parse_mode(mode: NumberingMode | str) -> NumberingMode:
    """Return the NumberingMode for an enum member or its string value.

    Raises:
        InvalidArgumentError: If the value is not a recognised mode.
    """
    if isinstance(mode, NumberingMode):
        return mode
    try:
        return NumberingMode(mode)
    except ValueError as exc:
        raise InvalidArgumentError("Cannot set invalid mode") from exc


def check_channel(channel: object) -> None:
    """Raise InvalidArgumentError if no channel was given."""
    if channel is None or channel == "" or isinstance(channel, bool):
        raise InvalidArgumentError("Channel not specified")


class ChannelResolver:
    """Resolves channels to physical pins.

    Logical resolution detects the board revision on first use; physical
    resolution never touches the revision source.

    Args:
        detector: Revision detector selecting the pin table.
    """

    def __init__(self, detector: RevisionDetector) -> None:
        self._detector = detector

    async def resolve(self, channel: Channel, mode: NumberingMode) -> PhysicalPin:
        """Resolve a channel in the given numbering mode.

        Args:
            channel: Channel number (int or decimal string).
            mode: Numbering mode to interpret the channel in.

        Returns:
            The physical pin identifier.

        Raises:
            InvalidArgumentError: If the channel is missing.
            UnmappedChannelError: If a logical channel has no GPIO pin.
            RevisionDetectionError: If the board revision cannot be read.
        """
        check_channel(channel)

        if mode is NumberingMode.PHYSICAL:
            return PhysicalPin(str(channel))

        tier = await self._detector.detect()
        try:
            header_pin = int(channel)
        except (TypeError, ValueError) as exc:
            raise UnmappedChannelError(f"Channel {channel!r} is not a header pin") from exc

        pin = PhysicalPin(str(lookup_pin(tier, header_pin)))
        logger.debug("Resolved channel %s to pin %s (%s)", channel, pin, tier.value)
        return pin
