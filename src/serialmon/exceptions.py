"""Exception hierarchy for serial monitor sessions."""

from __future__ import annotations


class SerialMonError(Exception):
    """Base exception for all serialmon errors."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(message)


class InvalidInputError(SerialMonError):
    """User-supplied input could not be parsed or is not acceptable."""


class PreconditionError(SerialMonError):
    """The session is not in a state that permits the operation."""


class SessionNotStartedError(PreconditionError):
    """No connection handle has been created yet."""


class SessionNotOpenError(PreconditionError):
    """The connection handle exists but is not actively open."""


class DriverError(SerialMonError):
    """The serial driver rejected an open, stop, baud-rate change or write."""


class ConfigError(InvalidInputError):
    """Settings could not be loaded or failed validation."""


class ContextError(SerialMonError):
    """The device context could not be persisted."""
