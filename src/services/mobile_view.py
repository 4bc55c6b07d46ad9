"""
Condensed mobile calendar: month day-picker plus agenda for one day.
"""

from dataclasses import dataclass
from datetime import date

from core.config import MOBILE_MAX_DOTS, WEEKDAY_NAMES_SHORT
from models.events import CalendarItem
from models.view_state import Direction, ViewMode, advance
from services.calendar_utils import (
    days_in_month_grid,
    events_for_date,
    format_day_label,
    format_month_label,
    is_same_day,
    resolve_locale,
    week_days,
)
from services.summary import (
    MeetingSummary,
    Navigate,
    click_outcome,
    status_color,
    status_label,
    time_range,
)


@dataclass(frozen=True)
class MobileDay:
    date: date
    is_today: bool
    is_selected: bool
    dot_count: int


@dataclass(frozen=True)
class AgendaItem:
    event: CalendarItem
    time_label: str
    location: str
    client: str | None
    category: str | None
    status_label: str | None
    color: str


@dataclass(frozen=True)
class MobileLayout:
    month_label: str
    weekday_headers: tuple[str, ...]
    days: tuple[MobileDay | None, ...]
    week_strip: tuple[MobileDay, ...]
    selected_label: str
    count_label: str
    agenda: tuple[AgendaItem, ...]

    @property
    def is_empty(self) -> bool:
        return not self.agenda


def agenda_item(event: CalendarItem) -> AgendaItem:
    has_client = event.organization is not None or event.contact is not None
    return AgendaItem(
        event=event,
        time_label=time_range(event),
        location=event.location,
        client=event.client_name if has_client else None,
        category=event.category.name if event.category else None,
        status_label=status_label(event),
        color=status_color(event),
    )


class MobileCalendar:
    """
    Month strip with a selected day.

    Navigation moves the displayed month only; the selection stays where the
    user tapped until they tap again.
    """

    def __init__(self, current_date: date | None = None, selected_date: date | None = None,
                 today: date | None = None, locale: str | None = None):
        self.today = today or date.today()
        self.current_date = current_date or self.today
        self.selected_date = selected_date or self.today
        self.locale = locale

    def navigate(self, direction: Direction | str) -> date:
        self.current_date = advance(self.current_date, ViewMode.MONTH, direction)
        return self.current_date

    def select(self, d: date) -> None:
        self.selected_date = d

    def click_event(self, event: CalendarItem) -> MeetingSummary | Navigate:
        return click_outcome(event)

    def _day(self, d: date, events) -> MobileDay:
        return MobileDay(
            date=d,
            is_today=is_same_day(d, self.today),
            is_selected=is_same_day(d, self.selected_date),
            dot_count=min(len(events_for_date(d, events)), MOBILE_MAX_DOTS),
        )

    def render(self, events) -> MobileLayout:
        events = list(events)
        selected = events_for_date(self.selected_date, events)
        count = len(selected)
        return MobileLayout(
            month_label=format_month_label(self.current_date, self.locale),
            weekday_headers=tuple(WEEKDAY_NAMES_SHORT[resolve_locale(self.locale)]),
            days=tuple(
                self._day(d, events) if d is not None else None
                for d in days_in_month_grid(self.current_date)
            ),
            week_strip=tuple(self._day(d, events) for d in week_days(self.selected_date)),
            selected_label=format_day_label(self.selected_date, self.locale),
            count_label=f"{count} {'wydarzenie' if count == 1 else 'wydarzeń'}",
            agenda=tuple(agenda_item(e) for e in selected),
        )
