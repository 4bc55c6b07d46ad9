"""
Hour-grid layouts for the week and day views.

Blocks are placed by top/height only. Overlapping items are not split into
columns; they simply overlap on screen.
"""

from dataclasses import dataclass
from datetime import date

from core.config import HOUR_HEIGHT_PX, HOURS, WEEKDAY_NAMES_SHORT
from models.events import CalendarItem
from services.calendar_utils import (
    event_position,
    events_for_date,
    format_day_label,
    format_week_label,
    is_same_day,
    resolve_locale,
    sort_by_start,
    week_days,
)
from services.month_view import chip_color
from services.summary import DayStatistics, day_statistics, time_range


@dataclass(frozen=True)
class HourRow:
    hour: int
    label: str
    top: int


@dataclass(frozen=True)
class EventBlock:
    event: CalendarItem
    top: float
    height: float
    color: str
    time_label: str


@dataclass(frozen=True)
class DayColumn:
    date: date
    header: str
    is_today: bool
    blocks: tuple[EventBlock, ...]


@dataclass(frozen=True)
class WeekGrid:
    reference_date: date
    label: str
    hours: tuple[HourRow, ...]
    columns: tuple[DayColumn, ...]

    @property
    def height(self) -> int:
        return len(self.hours) * HOUR_HEIGHT_PX


@dataclass(frozen=True)
class DayGrid:
    reference_date: date
    label: str
    hours: tuple[HourRow, ...]
    column: DayColumn
    agenda: tuple[CalendarItem, ...]
    statistics: DayStatistics

    @property
    def height(self) -> int:
        return len(self.hours) * HOUR_HEIGHT_PX


def hour_rows() -> tuple[HourRow, ...]:
    """24 fixed rows, 00:00 to 23:00."""
    return tuple(HourRow(hour=h, label=f"{h:02d}:00", top=h * HOUR_HEIGHT_PX) for h in HOURS)


def event_block(event: CalendarItem) -> EventBlock:
    position = event_position(event)
    return EventBlock(
        event=event,
        top=position.top,
        height=position.height,
        color=chip_color(event),
        time_label=time_range(event),
    )


def day_column(d: date, events, today: date, header: str) -> DayColumn:
    day_events = sort_by_start(events_for_date(d, events))
    return DayColumn(
        date=d,
        header=header,
        is_today=is_same_day(d, today),
        blocks=tuple(event_block(e) for e in day_events),
    )


def render_week(
    reference_date: date,
    events,
    today: date | None = None,
    locale: str | None = None,
) -> WeekGrid:
    """Seven day columns (Monday first) over the hour grid."""
    today = today or date.today()
    events = list(events)
    headers = WEEKDAY_NAMES_SHORT[resolve_locale(locale)]
    columns = tuple(
        day_column(d, events, today, f"{headers[i]} {d.day}")
        for i, d in enumerate(week_days(reference_date))
    )
    return WeekGrid(
        reference_date=reference_date,
        label=format_week_label(reference_date, locale),
        hours=hour_rows(),
        columns=columns,
    )


def render_day(
    reference_date: date,
    events,
    today: date | None = None,
    locale: str | None = None,
) -> DayGrid:
    """Single column over the hour grid, plus the day's agenda and totals."""
    today = today or date.today()
    events = list(events)
    label = format_day_label(reference_date, locale)
    column = day_column(reference_date, events, today, label)
    agenda = tuple(block.event for block in column.blocks)
    return DayGrid(
        reference_date=reference_date,
        label=label,
        hours=hour_rows(),
        column=column,
        agenda=agenda,
        statistics=day_statistics(agenda),
    )
