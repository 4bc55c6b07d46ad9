"""
Per-employee grouping of the visible events.
"""

from dataclasses import dataclass
from datetime import date

from core.config import FALLBACK_STATUS_COLOR, STATUS_COLORS
from models.events import CalendarItem, Employee
from services.calendar_utils import format_date, format_month_label, sort_by_start


@dataclass(frozen=True)
class EmployeeEntry:
    event: CalendarItem
    date_label: str
    role: str | None
    client: str | None
    status_color: str


@dataclass(frozen=True)
class EmployeeSection:
    employee: Employee
    entries: tuple[EmployeeEntry, ...]

    @property
    def title(self) -> str:
        return self.employee.display_name

    @property
    def count_label(self) -> str:
        return events_count_label(len(self.entries))

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass(frozen=True)
class EmployeeBoard:
    reference_date: date
    label: str
    sections: tuple[EmployeeSection, ...]

    @property
    def is_empty(self) -> bool:
        return not self.sections


def events_count_label(count: int) -> str:
    """Polish plural: 1 wydarzenie, 2-4 wydarzenia, otherwise wydarzeń."""
    if count == 1:
        word = "wydarzenie"
    elif 1 < count < 5:
        word = "wydarzenia"
    else:
        word = "wydarzeń"
    return f"{count} {word}"


def employee_entry(event: CalendarItem, employee_id: str) -> EmployeeEntry:
    assignment = event.assignment_for(employee_id)
    has_client = event.organization is not None or event.contact is not None
    return EmployeeEntry(
        event=event,
        date_label=format_date(event.start),
        role=assignment.role if assignment else None,
        client=event.client_name if has_client else None,
        status_color=STATUS_COLORS.get(event.status, FALLBACK_STATUS_COLOR),
    )


def render_employees(
    reference_date: date,
    events,
    employees,
    locale: str | None = None,
) -> EmployeeBoard:
    """One section per employee with their events in chronological order."""
    events = list(events)
    sections = []
    for employee in employees:
        mine = sort_by_start(e for e in events if employee.id in e.involved_employee_ids)
        sections.append(
            EmployeeSection(
                employee=employee,
                entries=tuple(employee_entry(e, employee.id) for e in mine),
            )
        )
    return EmployeeBoard(
        reference_date=reference_date,
        label=format_month_label(reference_date, locale),
        sections=tuple(sections),
    )
