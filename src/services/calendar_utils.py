"""
Date grid, positioning and formatting helpers for calendar views.

All functions are pure. Timestamps are parsed once at ingest time
(parse_timestamp); layout helpers only ever see datetime objects.
"""

import math
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from core.config import (
    CALENDAR_LOCALE,
    HOUR_HEIGHT_PX,
    MIN_EVENT_HEIGHT_PX,
    MONTH_NAMES,
    MONTH_NAMES_GENITIVE,
    MONTH_NAMES_SHORT,
    WEEKDAY_NAMES,
)
from core.exceptions import EventDateError


@dataclass(frozen=True)
class Position:
    """Vertical placement of an event block, in pixels."""
    top: float
    height: float


# =============================================================================
# PARSING
# =============================================================================


def parse_timestamp(value) -> datetime:
    """
    Parse a stored timestamp into a naive local datetime.

    Accepts datetime objects and ISO 8601 strings (with 'Z' or an offset).
    Aware values are converted to local time.

    Raises:
        EventDateError: value is missing or not a valid timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise EventDateError(value) from e
    else:
        raise EventDateError(value, "missing timestamp")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


# =============================================================================
# GRIDS
# =============================================================================


def days_in_month_grid(d: date) -> list[date | None]:
    """
    Days of d's month, left-padded so each day sits under its weekday column.

    Weeks start on Monday. There is no trailing padding.
    """
    first = date(d.year, d.month, 1)
    _, days_in_month = monthrange(d.year, d.month)

    days: list[date | None] = [None] * first.weekday()
    days.extend(date(d.year, d.month, day) for day in range(1, days_in_month + 1))
    return days


def week_days(d: date) -> list[date]:
    """Seven consecutive days starting at the Monday of d's week."""
    js_day = (d.weekday() + 1) % 7  # 0 = Sunday
    offset = -6 if js_day == 0 else 1 - js_day
    monday = _as_date(d) + timedelta(days=offset)
    return [monday + timedelta(days=i) for i in range(7)]


def events_for_date(d: date, events: Iterable) -> list:
    """Events whose start falls on calendar day d."""
    target = _as_date(d)
    return [event for event in events if event.start.date() == target]


def sort_by_start(events: Iterable) -> list:
    return sorted(events, key=lambda event: event.start)


# =============================================================================
# POSITIONING
# =============================================================================


def duration_hours(event) -> int:
    """Whole hours between start and end (or start), rounded up."""
    end = event.end or event.start
    seconds = (end - event.start).total_seconds()
    return math.ceil(seconds / 3600)


def event_position(event) -> Position:
    """Top offset and height of an event block on a 60px-per-hour grid."""
    start = event.start
    top = (start.hour + start.minute / 60) * HOUR_HEIGHT_PX
    height = max(duration_hours(event) * HOUR_HEIGHT_PX, MIN_EVENT_HEIGHT_PX)
    return Position(top=top, height=height)


# =============================================================================
# DATE HELPERS
# =============================================================================


def is_same_day(a: date, b: date) -> bool:
    return _as_date(a) == _as_date(b)


def is_today(d: date, today: date | None = None) -> bool:
    return is_same_day(d, today or date.today())


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping to the last day of the target month."""
    index = d.month - 1 + months
    year, month = d.year + index // 12, index % 12 + 1
    day = min(d.day, monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def _as_date(d: date) -> date:
    return d.date() if isinstance(d, datetime) else d


# =============================================================================
# FORMATTING
# =============================================================================


def format_time(value: datetime) -> str:
    """Format as HH:MM."""
    return value.strftime("%H:%M")


def format_date(value: date) -> str:
    """Format as DD.MM.YYYY."""
    return value.strftime("%d.%m.%Y")


def format_date_time(value: datetime) -> str:
    """Format as '10.03.2025, 09:00'."""
    return f"{format_date(value)}, {format_time(value)}"


def format_short_date_time(value: datetime, locale: str | None = None) -> str:
    """Format as '10 mar, 09:00' (tooltip style)."""
    loc = resolve_locale(locale)
    return f"{value.day} {MONTH_NAMES_SHORT[loc][value.month - 1]}, {format_time(value)}"


def format_month_label(d: date, locale: str | None = None) -> str:
    """Format as 'marzec 2025'."""
    loc = resolve_locale(locale)
    return f"{MONTH_NAMES[loc][d.month - 1]} {d.year}"


def format_long_date(d: date, locale: str | None = None) -> str:
    """Format as '10 marca 2025'."""
    loc = resolve_locale(locale)
    return f"{d.day} {MONTH_NAMES_GENITIVE[loc][d.month - 1]} {d.year}"


def format_day_label(d: date, locale: str | None = None) -> str:
    """Format as 'poniedziałek, 10 marca 2025'."""
    loc = resolve_locale(locale)
    return f"{WEEKDAY_NAMES[loc][d.weekday()]}, {format_long_date(d, loc)}"


def format_week_label(d: date, locale: str | None = None) -> str:
    """Format as '10 mar - 16 marca 2025' for the Monday-based week of d."""
    loc = resolve_locale(locale)
    days = week_days(d)
    start, end = days[0], days[-1]
    return f"{start.day} {MONTH_NAMES_SHORT[loc][start.month - 1]} - {format_long_date(end, loc)}"


def resolve_locale(locale: str | None) -> str:
    loc = (locale or CALENDAR_LOCALE).lower()
    return loc if loc in MONTH_NAMES else "pl"
