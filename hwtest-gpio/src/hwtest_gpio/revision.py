"""Board revision detection from the system identity file.

The revision code is the last four hex digits of the ``Revision`` field in
``/proc/cpuinfo``. Only the first-generation revision 1 codes select the old pin
table; any other code, including codes this module has never seen, selects
the current one.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from hwtest_gpio.errors import RevisionDetectionError, RevisionParseError
from hwtest_gpio.pins import RevisionTier

logger = logging.getLogger(__name__)

DEFAULT_CPUINFO_PATH = Path("/proc/cpuinfo")

LEGACY_REVISIONS = frozenset({"0002", "0003"})

_REVISION_PATTERN = re.compile(r"Revision\s*:\s*[0-9a-fA-F]*([0-9a-fA-F]{4})")


def parse_revision(text: str) -> str:
    """Extract the four-digit revision code from system identity text.

    Args:
        text: Contents of the system identity file.

    Returns:
        Lower-cased four-digit revision code (e.g., "0002", "2082").

    Raises:
        RevisionParseError: If no revision field is present.
    """
    match = _REVISION_PATTERN.search(text)
    if match is None:
        raise RevisionParseError("No revision code found in system identity source")
    return match.group(1).lower()


def classify_revision(code: str) -> RevisionTier:
    """Map a revision code to its pin table tier."""
    if code in LEGACY_REVISIONS:
        return RevisionTier.TIER_A
    return RevisionTier.TIER_B


class RevisionDetector:
    """Detects and caches the board revision tier.

    The tier is cached only after a successful detection. A failed attempt
    leaves the cache empty so the next caller reads the source again.
    Once cached, the tier never changes until clear() is called.

    Args:
        path: System identity file to read.
    """

    def __init__(self, path: str | Path = DEFAULT_CPUINFO_PATH) -> None:
        self._path = Path(path)
        self._tier: RevisionTier | None = None
        self._code: str | None = None

    @property
    def tier(self) -> RevisionTier | None:
        """The cached tier, or None if detection has not succeeded yet."""
        return self._tier

    @property
    def code(self) -> str | None:
        """The revision code behind the cached tier."""
        return self._code

    async def detect(self) -> RevisionTier:
        """Return the board revision tier, reading the source on first use.

        Returns:
            The cached or newly detected tier.

        Raises:
            RevisionDetectionError: If the source cannot be read.
            RevisionParseError: If the source has no revision code.
        """
        if self._tier is not None:
            return self._tier

        loop = asyncio.get_running_loop()
        try:
            text = await loop.run_in_executor(None, self._read_source)
        except OSError as exc:
            raise RevisionDetectionError(
                f"Failed to read revision source {self._path}: {exc}"
            ) from exc

        code = parse_revision(text)
        tier = classify_revision(code)

        # Another caller may have finished first; its result stands.
        if self._tier is None:
            self._tier = tier
            self._code = code
            logger.info("Detected board revision %s (%s)", code, tier.value)
        return self._tier

    def clear(self) -> None:
        """Forget the cached tier."""
        self._tier = None
        self._code = None

    def _read_source(self) -> str:
        return self._path.read_text(encoding="utf-8", errors="replace")
