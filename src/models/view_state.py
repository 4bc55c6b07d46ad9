"""
View mode and reference-date transitions.
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum

from services.calendar_utils import (
    add_months,
    format_day_label,
    format_month_label,
    format_week_label,
)


class ViewMode(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    EMPLOYEE = "employee"


class Direction(str, Enum):
    PREV = "prev"
    NEXT = "next"


@dataclass(frozen=True)
class ViewState:
    """Reference date plus active view mode."""

    reference_date: date
    view: ViewMode = ViewMode.MONTH

    def label(self, locale: str | None = None) -> str:
        return period_label(self.reference_date, self.view, locale)


def advance(reference_date: date, view: ViewMode | str, direction: Direction | str) -> date:
    """
    Move the reference date by one unit of the view's granularity.

    The employee view has no granularity of its own and keeps the date.
    """
    view = ViewMode(view)
    step = 1 if Direction(direction) is Direction.NEXT else -1

    if view is ViewMode.MONTH:
        return add_months(reference_date, step)
    if view is ViewMode.WEEK:
        return reference_date + timedelta(days=7 * step)
    if view is ViewMode.DAY:
        return reference_date + timedelta(days=step)
    return reference_date


def advance_state(state: ViewState, direction: Direction | str) -> ViewState:
    return replace(state, reference_date=advance(state.reference_date, state.view, direction))


def set_view(state: ViewState, view: ViewMode | str) -> ViewState:
    """Switch mode; the reference date is kept."""
    return replace(state, view=ViewMode(view))


def go_today(state: ViewState, today: date | None = None) -> ViewState:
    return replace(state, reference_date=today or date.today())


def period_label(reference_date: date, view: ViewMode | str, locale: str | None = None) -> str:
    """Localized description of the period shown by a view."""
    view = ViewMode(view)
    if view is ViewMode.WEEK:
        return format_week_label(reference_date, locale)
    if view is ViewMode.DAY:
        return format_day_label(reference_date, locale)
    return format_month_label(reference_date, locale)
