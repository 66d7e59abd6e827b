"""Exception types for hwtest-gpio.

All GPIO failures inherit from GpioError so callers can handle any failure of
the library with a single except clause. Where a failure also fits a builtin
category, the error additionally subclasses that builtin (ValueError,
LookupError, OSError) so generic handlers keep working.

Exception hierarchy:
    GpioError (base)
    +-- InvalidArgumentError: Missing channel, bad direction or bad mode
    +-- UnmappedChannelError: Channel has no pin in the active pin table
    +-- NotExportedError: Read/write on a pin that was never set up
    +-- RevisionDetectionError: Board revision source unreadable
    |   +-- RevisionParseError: Board revision source has no revision code
    +-- GpioFilesystemError: Pin-control filesystem operation failed
"""


class GpioError(Exception):
    """Base exception for all hwtest-gpio errors."""


class InvalidArgumentError(GpioError, ValueError):
    """Raised when a channel, direction or numbering mode is invalid."""


class UnmappedChannelError(GpioError, LookupError):
    """Raised when a board-header channel has no connected GPIO pin.

    This covers power/ground header positions as well as channel numbers
    outside the header of the detected board revision.
    """


class NotExportedError(GpioError):
    """Raised when reading or writing a pin that is not exported.

    Call GpioController.setup() for the channel first.
    """


class RevisionDetectionError(GpioError):
    """Raised when the board revision cannot be determined.

    The cause (typically an OSError from reading the system identity
    file) is chained to the exception.
    """


class RevisionParseError(RevisionDetectionError):
    """Raised when the system identity source contains no revision code."""


class GpioFilesystemError(GpioError, OSError):
    """Raised when an export, unexport, direction or value access fails."""
