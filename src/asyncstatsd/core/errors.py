"""Exception hierarchy for asyncstatsd."""

from typing import Any


class StatsdError(Exception):
    """Base exception for all asyncstatsd errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigError(StatsdError, ValueError):
    """Raised when an endpoint or other setting is invalid."""


class ResolutionError(StatsdError):
    """Raised when a host or service lookup fails."""


class ConnectError(StatsdError):
    """Raised when the client socket cannot be set up."""


class BindError(StatsdError):
    """Raised when the server cannot bind its socket."""


class WriteError(StatsdError):
    """Raised when the OS rejects a datagram write."""


class ReceiveError(StatsdError):
    """Reported when reading an inbound datagram fails."""


class DecodeError(StatsdError, ValueError):
    """Raised when a line is not valid statsd wire format."""


class UnhandledEventError(StatsdError):
    """Raised when an event has no handlers and the bus is strict."""
