"""API Pydantic models."""

from .responses import (
    CalendarResponse,
    CreatedResponse,
    DayEventsResponse,
    ErrorCodes,
    ErrorResponse,
    FilterOptionsResponse,
    HealthResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "CalendarResponse",
    "FilterOptionsResponse",
    "DayEventsResponse",
    "CreatedResponse",
]
