"""
Month grid layout.

Each day cell shows at most two events. When more exist, the second chip
is drawn as a stack (up to two shadow layers) and the cell carries an
overflow count for the "show all" list.
"""

from dataclasses import dataclass, field
from datetime import date

from core.config import (
    ACCENT_COLOR,
    MEETING_COLOR,
    MONTH_MAX_STACK_LAYERS,
    MONTH_MAX_VISIBLE_EVENTS,
    STACK_BASE_OPACITY,
    STACK_OFFSET_PX,
    STACK_OPACITY_STEP,
    WEEKDAY_NAMES_SHORT,
)
from models.events import CalendarItem
from services.calendar_utils import (
    days_in_month_grid,
    events_for_date,
    format_month_label,
    is_same_day,
    resolve_locale,
)


@dataclass(frozen=True)
class StackLayer:
    """One shadow card drawn behind a stacked chip."""
    offset_px: int
    opacity: float
    z_index: int


@dataclass(frozen=True)
class EventChip:
    event: CalendarItem
    color: str
    icon_svg: str | None = None
    stacked: bool = False
    lift_px: int = 0
    stack_layers: tuple[StackLayer, ...] = ()


@dataclass(frozen=True)
class MonthCell:
    date: date
    is_today: bool
    events: tuple[CalendarItem, ...]
    chips: tuple[EventChip, ...]
    overflow_count: int

    @property
    def total_count(self) -> int:
        return len(self.events)

    @property
    def is_empty(self) -> bool:
        return not self.events


@dataclass(frozen=True)
class MonthGrid:
    reference_date: date
    label: str
    weekday_headers: tuple[str, ...]
    cells: tuple[MonthCell | None, ...] = field(default=())

    @property
    def weeks(self) -> list[tuple[MonthCell | None, ...]]:
        """Cells chunked into rows of seven (the last row may be shorter)."""
        return [self.cells[i:i + 7] for i in range(0, len(self.cells), 7)]

    def cell_for(self, d: date) -> MonthCell | None:
        for cell in self.cells:
            if cell is not None and cell.date == d:
                return cell
        return None


def chip_color(event: CalendarItem) -> str:
    """Meetings are white, events use their category color, else the accent."""
    if event.is_meeting:
        return MEETING_COLOR
    if event.category and event.category.color:
        return event.category.color
    return ACCENT_COLOR


def stack_layers(remaining: int) -> tuple[StackLayer, ...]:
    count = min(remaining, MONTH_MAX_STACK_LAYERS)
    return tuple(
        StackLayer(
            offset_px=(i + 1) * STACK_OFFSET_PX,
            opacity=round(STACK_BASE_OPACITY - i * STACK_OPACITY_STEP, 2),
            z_index=-(i + 1),
        )
        for i in range(count)
    )


def build_cell(d: date, events: list[CalendarItem], today: date) -> MonthCell:
    day_events = events_for_date(d, events)
    remaining = len(day_events) - MONTH_MAX_VISIBLE_EVENTS
    visible = day_events[:MONTH_MAX_VISIBLE_EVENTS]

    chips = []
    for idx, event in enumerate(visible):
        stacked = idx == MONTH_MAX_VISIBLE_EVENTS - 1 and remaining > 0
        chips.append(
            EventChip(
                event=event,
                color=chip_color(event),
                icon_svg=event.category.icon_svg if event.category else None,
                stacked=stacked,
                lift_px=remaining * STACK_OFFSET_PX if stacked else 0,
                stack_layers=stack_layers(remaining) if stacked else (),
            )
        )

    return MonthCell(
        date=d,
        is_today=is_same_day(d, today),
        events=tuple(day_events),
        chips=tuple(chips),
        overflow_count=max(remaining, 0),
    )


def render_month(
    reference_date: date,
    events,
    today: date | None = None,
    locale: str | None = None,
) -> MonthGrid:
    """Lay out the month containing reference_date."""
    today = today or date.today()
    events = list(events)
    cells = tuple(
        build_cell(d, events, today) if d is not None else None
        for d in days_in_month_grid(reference_date)
    )
    return MonthGrid(
        reference_date=reference_date,
        label=format_month_label(reference_date, locale),
        weekday_headers=tuple(WEEKDAY_NAMES_SHORT[resolve_locale(locale)]),
        cells=cells,
    )
