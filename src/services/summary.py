"""
Tooltip, meeting summary and aggregate statistics for calendar items.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from core.config import (
    EVENT_STATUSES,
    FALLBACK_STATUS_COLOR,
    MISSING_VALUE_LABEL,
    STATUS_COLORS,
    STATUS_LABELS,
    UNKNOWN_STATUS_LABEL,
    UPCOMING_LIMIT,
)
from models.events import CalendarItem, Meeting
from services.calendar_utils import (
    format_date_time,
    format_short_date_time,
    format_time,
    sort_by_start,
)


@dataclass(frozen=True)
class Tooltip:
    event_id: str
    title: str
    client: str
    when: str
    location: str
    status_label: str | None


@dataclass(frozen=True)
class MeetingSummary:
    """Inline summary shown when a meeting is clicked."""
    meeting_id: str
    title: str
    when: str
    location: str
    notes: str

    def as_text(self) -> str:
        return (
            f"Spotkanie: {self.title}\n\n"
            f"Data: {self.when}\n"
            f"Lokalizacja: {self.location}\n\n"
            f"Notatki: {self.notes}"
        )


@dataclass(frozen=True)
class DayStatistics:
    total_budget: float
    equipment_count: int
    employee_count: int


def status_label(event: CalendarItem) -> str | None:
    """Display label; None for meetings, a marker for unknown codes."""
    if event.status is None:
        return None
    return STATUS_LABELS.get(event.status, UNKNOWN_STATUS_LABEL)


def status_color(event: CalendarItem) -> str:
    if event.category and event.category.color:
        return event.category.color
    return STATUS_COLORS.get(event.status, FALLBACK_STATUS_COLOR)


def time_range(event: CalendarItem) -> str:
    """Format as '09:00 - 10:30', or just the start."""
    if event.end:
        return f"{format_time(event.start)} - {format_time(event.end)}"
    return format_time(event.start)


def tooltip_for(event: CalendarItem, locale: str | None = None) -> Tooltip:
    return Tooltip(
        event_id=event.id,
        title=event.name,
        client=event.client_name,
        when=format_short_date_time(event.start, locale),
        location=event.location,
        status_label=status_label(event),
    )


def meeting_summary(meeting: Meeting) -> MeetingSummary:
    return MeetingSummary(
        meeting_id=meeting.id,
        title=meeting.name,
        when=format_date_time(meeting.start),
        location=meeting.location or MISSING_VALUE_LABEL,
        notes=meeting.notes or MISSING_VALUE_LABEL,
    )


def day_statistics(events: Iterable[CalendarItem]) -> DayStatistics:
    """Budget and resource totals for a list of items (meetings count as zero)."""
    total_budget = 0.0
    equipment_count = 0
    employee_count = 0
    for event in events:
        if event.is_meeting:
            continue
        total_budget += event.budget or 0
        equipment_count += len(event.equipment)
        employee_count += len(event.employees)
    return DayStatistics(
        total_budget=total_budget,
        equipment_count=equipment_count,
        employee_count=employee_count,
    )


def status_counts(events: Iterable[CalendarItem]) -> dict[str, int]:
    """Per-status counts over the closed status set, zero-filled."""
    counts = {status: 0 for status in EVENT_STATUSES}
    for event in events:
        if event.status in counts:
            counts[event.status] += 1
    return counts


def upcoming_events(
    events: Iterable[CalendarItem],
    now: datetime | None = None,
    limit: int = UPCOMING_LIMIT,
) -> list[CalendarItem]:
    """The next `limit` items starting at or after now."""
    now = now or datetime.now()
    return sort_by_start(e for e in events if e.start >= now)[:limit]


@dataclass(frozen=True)
class Navigate:
    """Signal to open the detail page of a business event."""
    event_id: str


def click_outcome(event: CalendarItem) -> MeetingSummary | Navigate:
    """Meetings show an inline summary; business events navigate."""
    if isinstance(event, Meeting):
        return meeting_summary(event)
    return Navigate(event_id=event.id)
