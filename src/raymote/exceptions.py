"""Exception hierarchy for the IR bridge."""

from __future__ import annotations


class RaymoteError(Exception):
    """Base exception for all Raymote errors."""

    def __init__(self, message: str, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__(message)


class EnumerationError(RaymoteError):
    """Listing serial ports failed."""


class ConnectError(RaymoteError):
    """Opening a serial port failed (busy, permission denied, not found)."""

    def __init__(self, port: str, reason: str) -> None:
        self.port = port
        super().__init__(f"Failed to open {port}: {reason}", reason=reason)


class SendError(RaymoteError):
    """Base for transmit failures."""


class NotConnectedError(SendError):
    """No transmitter connection is open."""

    def __init__(self, message: str = "Transmitter not connected") -> None:
        super().__init__(message)


class WriteFailedError(SendError):
    """Writing or flushing the command to the transmitter failed."""


class PersistError(RaymoteError):
    """Saving persisted configuration failed."""



class SubscriberClosedError(RaymoteError):
    """An event could not be delivered because the subscriber is gone or stalled."""
