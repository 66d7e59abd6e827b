"""Board-header to GPIO pin tables for the 26-pin Raspberry Pi header.

The header pinout changed between the first board revision and every later
one: header pins 3, 5 and 13 are wired to different GPIO lines. Power and
ground positions have no GPIO line and are stored as None.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from hwtest_gpio.errors import UnmappedChannelError


class RevisionTier(Enum):
    """Hardware revision tier selecting the active pin table.

    Attributes:
        TIER_A: Revision 1 boards (revision codes 0002 and 0003).
        TIER_B: Revision 2 and every later board.
    """

    TIER_A = "rev1"
    TIER_B = "rev2"


PinTable = Mapping[int, int | None]

_TIER_A_PINS: dict[int, int | None] = {
    1: None,
    2: None,
    3: 0,
    4: None,
    5: 1,
    6: None,
    7: 4,
    8: 14,
    9: None,
    10: 15,
    11: 17,
    12: 18,
    13: 21,
    14: None,
    15: 22,
    16: 23,
    17: None,
    18: 24,
    19: 10,
    20: None,
    21: 9,
    22: 25,
    23: 11,
    24: 8,
    25: None,
    26: 7,
}

# Revision 2 rewired I2C to bus 1 and moved header pin 13 from GPIO21 to GPIO27.
_TIER_B_PINS: dict[int, int | None] = {
    **_TIER_A_PINS,
    3: 2,
    5: 3,
    13: 27,
}

PIN_TABLES: Mapping[RevisionTier, PinTable] = MappingProxyType(
    {
        RevisionTier.TIER_A: MappingProxyType(_TIER_A_PINS),
        RevisionTier.TIER_B: MappingProxyType(_TIER_B_PINS),
    }
)


def lookup_pin(tier: RevisionTier, channel: int) -> int:
    """Return the GPIO line wired to a header channel.

    Args:
        tier: Revision tier of the board.
        channel: Board-header pin number (1-26).

    Returns:
        GPIO line number.

    Raises:
        UnmappedChannelError: If the channel is outside the header or is a
            power/ground position.
    """
    table = PIN_TABLES[tier]
    if channel not in table:
        raise UnmappedChannelError(
            f"Channel {channel} is outside the {tier.value} header (1-{len(table)})"
        )
    pin = table[channel]
    if pin is None:
        raise UnmappedChannelError(f"Channel {channel} is not connected to a GPIO pin")
    return pin
