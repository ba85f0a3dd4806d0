"""Custom exceptions for iZone integration."""


class IZoneError(Exception):
    """Base exception for iZone."""


class IZoneTransportError(IZoneError):
    """Raised when a request to the iZone device fails.

    Covers network failures, timeouts, non-2xx responses and bodies that are
    not valid JSON.
    """


class IZoneParseError(IZoneTransportError):
    """Raised when a response cannot be parsed into the expected fields."""


class IZoneInvalidArgumentError(IZoneError):
    """Raised when a command or read is given an unusable argument."""


class IZoneUnconfirmedCommandError(IZoneError):
    """Raised when the device accepted a command but did not apply it.

    The state read back after the write is authoritative; the HTTP 200 of the
    write itself is not.
    """

    def __init__(self, command: str, expected, actual):
        super().__init__(f"{command} not confirmed by device: expected {expected!r}, got {actual!r}")
        self.command = command
        self.expected = expected
        self.actual = actual
