"""Exception hierarchy for pickset."""


class PicksetError(Exception):
    """Base class for all errors raised by pickset."""


class TimestampParseError(PicksetError, ValueError):
    """Raised when a timestamp string does not match the expected layout."""


class DatabaseError(PicksetError):
    """A database operation failed.

    Attributes:
        code: Driver-specific error code, if one was available
    """

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code: str | None = code


class DatabaseConfigError(DatabaseError):
    """The connection could not be attempted because it is misconfigured."""


class DatabaseConnectError(DatabaseError):
    """The driver refused or failed to open the connection."""
