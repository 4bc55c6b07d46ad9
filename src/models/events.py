"""
Data models for calendar events, meetings and lookup tables.

Raw store records are plain dicts (TypedDict for hints). Once ingested they
become one of two frozen dataclasses sharing the time-grid contract:
BusinessEvent or Meeting.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TypedDict, Union

from core.config import (
    ACCENT_COLOR,
    EVENT_STATUSES,
    MEETING_CATEGORY_NAME,
    NO_CLIENT_LABEL,
)

# =============================================================================
# RAW STORE RECORDS
# =============================================================================


class CategoryOption(TypedDict):
    """Event category lookup row."""
    id: str
    name: str
    color: str


class ClientOption(TypedDict):
    """Client lookup row (organization or individual contact)."""
    id: str
    name: str
    type: str
    alias: str | None


class EmployeeOption(TypedDict):
    """Employee lookup row."""
    id: str
    name: str
    surname: str
    nickname: str | None


class FilterOptionsRecord(TypedDict):
    """Lookup tables returned alongside the event collection."""
    categories: list[CategoryOption]
    clients: list[ClientOption]
    employees: list[EmployeeOption]


class CapabilitiesRecord(TypedDict):
    """Permission lookup for the session user."""
    id: str | None
    can_create_events: bool
    permissions: list[str]


# =============================================================================
# SHARED VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class Category:
    id: str | None
    name: str
    color: str | None = None
    icon_svg: str | None = None


@dataclass(frozen=True)
class Organization:
    id: str
    name: str
    alias: str | None = None

    @property
    def display_name(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class Contact:
    id: str
    full_name: str


@dataclass(frozen=True)
class EmployeeAssignment:
    """Links an employee to a business event."""
    employee_id: str
    role: str | None = None
    hours: float | None = None
    status: str | None = None


@dataclass(frozen=True)
class MeetingParticipant:
    employee_id: str | None = None
    contact_id: str | None = None


@dataclass(frozen=True)
class EquipmentBooking:
    name: str
    quantity: int = 1


@dataclass(frozen=True)
class VehicleAssignment:
    name: str


@dataclass(frozen=True)
class SubTask:
    title: str
    status: str | None = None


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    surname: str = ""
    nickname: str | None = None

    @property
    def display_name(self) -> str:
        return self.nickname or f"{self.name} {self.surname}".strip()


MEETING_CATEGORY = Category(id=None, name=MEETING_CATEGORY_NAME, color=ACCENT_COLOR)


# =============================================================================
# CALENDAR ITEMS
# =============================================================================


@dataclass(frozen=True)
class BusinessEvent:
    """A business or individual event with client, status and resources."""

    id: str
    name: str
    start: datetime
    end: datetime | None = None
    status: str = "inquiry"
    organization: Organization | None = None
    contact: Contact | None = None
    category: Category | None = None
    location: str = ""
    description: str = ""
    budget: float | None = None
    final_cost: float | None = None
    created_by: str | None = None
    employees: tuple[EmployeeAssignment, ...] = ()
    equipment: tuple[EquipmentBooking, ...] = ()
    vehicles: tuple[VehicleAssignment, ...] = ()
    tasks: tuple[SubTask, ...] = ()
    attachments: tuple[str, ...] = ()

    is_meeting = False

    @property
    def has_known_status(self) -> bool:
        return self.status in EVENT_STATUSES

    @property
    def involved_employee_ids(self) -> frozenset[str]:
        return frozenset(a.employee_id for a in self.employees)

    @property
    def client_name(self) -> str:
        if self.organization:
            return self.organization.display_name
        if self.contact:
            return self.contact.full_name
        return NO_CLIENT_LABEL

    def assignment_for(self, employee_id: str) -> EmployeeAssignment | None:
        for assignment in self.employees:
            if assignment.employee_id == employee_id:
                return assignment
        return None


@dataclass(frozen=True)
class Meeting:
    """A lightweight meeting with participants and notes."""

    id: str
    name: str
    start: datetime
    end: datetime | None = None
    location: str = ""
    notes: str = ""
    is_all_day: bool = False
    color: str = ACCENT_COLOR
    created_by: str | None = None
    participants: tuple[MeetingParticipant, ...] = field(default=())

    is_meeting = True
    status = None
    organization = None
    contact = None

    @property
    def category(self) -> Category:
        return MEETING_CATEGORY

    @property
    def involved_employee_ids(self) -> frozenset[str]:
        return frozenset(p.employee_id for p in self.participants if p.employee_id)

    @property
    def client_name(self) -> str:
        return NO_CLIENT_LABEL

    def assignment_for(self, employee_id: str) -> EmployeeAssignment | None:
        if employee_id in self.involved_employee_ids:
            return EmployeeAssignment(employee_id=employee_id)
        return None


CalendarItem = Union[BusinessEvent, Meeting]


@dataclass(frozen=True)
class FilterOptions:
    """Lookup tables for the filter panel and employee view."""

    categories: tuple[Category, ...] = ()
    clients: tuple[Organization | Contact, ...] = ()
    employees: tuple[Employee, ...] = ()


@dataclass(frozen=True)
class CurrentUser:
    id: str | None
    can_create_events: bool = False
    permissions: frozenset[str] = frozenset()
