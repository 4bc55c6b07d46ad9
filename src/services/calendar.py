"""
Event ingestion from the store.

Fetches raw records and parses them into BusinessEvent / Meeting objects.
Malformed records are skipped and logged so one bad row never blanks the
whole calendar.
"""

import logging

from core.config import ACCENT_COLOR, EVENT_CREATE_PERMISSIONS
from core.exceptions import EventDateError
from models.events import (
    BusinessEvent,
    CalendarItem,
    Category,
    Contact,
    CurrentUser,
    Employee,
    EmployeeAssignment,
    EquipmentBooking,
    FilterOptions,
    Meeting,
    MeetingParticipant,
    Organization,
    SubTask,
    VehicleAssignment,
)
from services.calendar_utils import parse_timestamp

logger = logging.getLogger(__name__)


async def fetch_calendar_events(store) -> tuple[CalendarItem, ...]:
    """Fetch the full event + meeting collection, ordered by start."""
    records = await store.fetch_events()
    return parse_records(records)


async def fetch_filter_options(store) -> FilterOptions:
    """Fetch category, client and employee lookup tables."""
    record = await store.fetch_filter_options()
    return parse_filter_options(record)


async def fetch_current_user(store, user_id: str | None) -> CurrentUser:
    """Resolve the session user's capabilities."""
    if not user_id:
        return CurrentUser(id=None)
    record = await store.current_user_capabilities(user_id)
    permissions = frozenset(record.get("permissions") or ())
    return CurrentUser(
        id=record.get("id") or user_id,
        can_create_events=bool(record.get("can_create_events"))
        or bool(permissions & EVENT_CREATE_PERMISSIONS),
        permissions=permissions,
    )


# =============================================================================
# PARSING
# =============================================================================


def parse_records(records: list[dict]) -> tuple[CalendarItem, ...]:
    """Parse raw records, skipping (and logging) any that are malformed."""
    items = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning("Skipping calendar record of type %s", type(record).__name__)
            continue
        try:
            items.append(parse_record(record))
        except (EventDateError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping calendar record %s: %s", record.get("id", "?"), e)
    items.sort(key=lambda item: item.start)
    return tuple(items)


def parse_record(record: dict) -> CalendarItem:
    if record.get("is_meeting"):
        return parse_meeting(record)
    return parse_event(record)


def parse_event(record: dict) -> BusinessEvent:
    """Parse a business/individual event record."""
    event_id = str(record["id"])
    start = parse_timestamp(record.get("event_date"))
    end = _parse_end(record.get("event_end_date"), start, event_id)

    status = record.get("status") or ""
    event = BusinessEvent(
        id=event_id,
        name=record.get("name") or "",
        start=start,
        end=end,
        status=status,
        category=_parse_category(record.get("category")),
        location=record.get("location") or "",
        description=record.get("description") or "",
        budget=_to_float(record.get("budget")),
        final_cost=_to_float(record.get("final_cost")),
        created_by=record.get("created_by"),
        employees=tuple(
            EmployeeAssignment(
                employee_id=str(a["employee_id"]),
                role=a.get("role"),
                hours=_to_float(a.get("hours")),
                status=a.get("status"),
            )
            for a in record.get("employees") or ()
            if a.get("employee_id")
        ),
        equipment=tuple(
            EquipmentBooking(name=item.get("name") or "", quantity=int(item.get("quantity") or 1))
            for item in record.get("equipment") or ()
        ),
        vehicles=tuple(VehicleAssignment(name=v.get("name") or "") for v in record.get("vehicles") or ()),
        tasks=tuple(
            SubTask(title=t.get("title") or "", status=t.get("status")) for t in record.get("tasks") or ()
        ),
        attachments=tuple(str(a) for a in record.get("attachments") or ()),
        **_parse_client(record, event_id),
    )

    if not event.has_known_status:
        logger.warning("Event %s has unknown status %r", event_id, status)
    return event


def parse_meeting(record: dict) -> Meeting:
    """Parse a meeting record."""
    meeting_id = str(record["id"])
    start = parse_timestamp(record.get("datetime_start"))
    end = _parse_end(record.get("datetime_end"), start, meeting_id)

    return Meeting(
        id=meeting_id,
        name=record.get("title") or "",
        start=start,
        end=end,
        location=record.get("location_name") or record.get("location_text") or "",
        notes=record.get("notes") or "",
        is_all_day=bool(record.get("is_all_day")),
        color=record.get("color") or ACCENT_COLOR,
        created_by=record.get("created_by"),
        participants=tuple(
            MeetingParticipant(employee_id=p.get("employee_id"), contact_id=p.get("contact_id"))
            for p in record.get("participants") or ()
        ),
    )


def parse_filter_options(record: dict) -> FilterOptions:
    """Parse lookup tables into value objects."""
    clients = []
    for client in record.get("clients") or ():
        if client.get("type") == "individual":
            clients.append(Contact(id=str(client["id"]), full_name=client.get("name") or ""))
        else:
            clients.append(
                Organization(id=str(client["id"]), name=client.get("name") or "", alias=client.get("alias"))
            )

    return FilterOptions(
        categories=tuple(
            Category(id=str(c["id"]), name=c["name"], color=c.get("color"))
            for c in record.get("categories") or ()
        ),
        clients=tuple(clients),
        employees=tuple(
            Employee(
                id=str(e["id"]),
                name=e.get("name") or "",
                surname=e.get("surname") or "",
                nickname=e.get("nickname"),
            )
            for e in record.get("employees") or ()
        ),
    )


def _parse_end(value, start, item_id: str):
    """Parse an optional end; an end before start is clamped to start."""
    if value in (None, ""):
        return None
    end = parse_timestamp(value)
    if end < start:
        logger.warning("Item %s ends before it starts; clamping end to start", item_id)
        return start
    return end


def _parse_client(record: dict, event_id: str) -> dict:
    organization = record.get("organization")
    contact = record.get("contact")

    if organization and contact:
        logger.warning("Event %s has both organization and contact; using organization", event_id)
        contact = None

    return {
        "organization": Organization(
            id=str(organization["id"]),
            name=organization.get("name") or "",
            alias=organization.get("alias"),
        )
        if organization
        else None,
        "contact": Contact(id=str(contact["id"]), full_name=contact.get("full_name") or "")
        if contact
        else None,
    }


def _parse_category(category: dict | None) -> Category | None:
    if not category:
        return None
    return Category(
        id=str(category["id"]) if category.get("id") is not None else None,
        name=category.get("name") or "",
        color=category.get("color"),
        icon_svg=category.get("icon_svg"),
    )


def _to_float(value) -> float | None:
    if value in (None, ""):
        return None
    return float(value)
