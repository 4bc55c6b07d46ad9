"""
Calendar error types.
"""


class CalendarError(Exception):
    """Base class for calendar core errors."""


class EventDateError(CalendarError, ValueError):
    """A stored timestamp could not be parsed."""

    def __init__(self, value, reason: str = "invalid timestamp"):
        self.value = value
        super().__init__(f"{reason}: {value!r}")


class StoreError(CalendarError):
    """Reading from the event store failed."""


class StoreWriteError(StoreError):
    """Creating an event or meeting failed."""


class PermissionDeniedError(CalendarError):
    """The current user lacks a capability required for the action."""
