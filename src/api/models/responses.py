"""Pydantic response models for API endpoints."""

from typing import Any

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class CalendarResponse(BaseModel):
    """Layout of one calendar view."""

    view: str
    reference_date: str  # YYYY-MM-DD
    label: str
    visible_count: int
    total_count: int
    active_filters: int
    status_counts: dict[str, int]
    layout: dict[str, Any]


class FilterOptionsResponse(BaseModel):
    categories: list[dict[str, Any]]
    clients: list[dict[str, Any]]
    employees: list[dict[str, Any]]
    client_filter_available: bool


class DayEventsResponse(BaseModel):
    """All visible events of one date (month cell overflow list)."""

    date: str
    label: str
    count: int
    events: list[dict[str, Any]]


class CreatedResponse(BaseModel):
    id: str
    kind: str  # "event" or "meeting"


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    WRITE_FAILED = "WRITE_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
