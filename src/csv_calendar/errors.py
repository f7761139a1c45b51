from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    FORMAT = "format"
    COMPONENT = "component"
    ORDERING = "ordering"
    TIMEZONE = "timezone"


class EventRowError(ValueError):
    """Raised when a single event row cannot be resolved into an interval."""

    kind: ErrorKind

    def with_context(self, prefix: str) -> EventRowError:
        """Return an error of the same kind with ``prefix`` prepended to the message."""
        return type(self)(f"{prefix}: {self}")


class FormatError(EventRowError):
    """Input text does not match a required grammar."""

    kind = ErrorKind.FORMAT


class ComponentError(EventRowError):
    """Input matched a grammar but its values are out of range or not a real instant."""

    kind = ErrorKind.COMPONENT


class OrderingError(EventRowError):
    """A computed end precedes its start."""

    kind = ErrorKind.ORDERING


class TimezoneError(EventRowError):
    """The identifier is not a recognized IANA time zone."""

    kind = ErrorKind.TIMEZONE
