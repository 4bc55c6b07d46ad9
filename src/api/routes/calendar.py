"""Calendar read and create endpoints."""

from dataclasses import replace
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from api.dependencies import current_employee_id, get_store, verify_api_key
from api.logging import RequestLog, logged_request
from api.models.responses import (
    CalendarResponse,
    CreatedResponse,
    DayEventsResponse,
    ErrorCodes,
    FilterOptionsResponse,
)
from api.serialization import client_to_dict, item_to_dict, to_jsonable
from core.config import EVENT_STATUSES
from core.exceptions import PermissionDeniedError, StoreError
from models.filters import FilterSet, active_filter_count
from models.payloads import EventCreate, MeetingCreate
from models.view_state import ViewMode
from services.calendar import fetch_current_user
from services.calendar_utils import format_day_label
from services.orchestrator import CalendarController

router = APIRouter(prefix="/v1/calendar")


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def calendar_filters(
    status_filter: Annotated[list[str], Query(alias="status")] = [],
    category: Annotated[list[str], Query()] = [],
    client: Annotated[list[str], Query()] = [],
    employee: Annotated[list[str], Query()] = [],
    mine: bool = False,
    assigned: bool = False,
) -> FilterSet:
    """Build a FilterSet from repeated query parameters."""
    unknown = [s for s in status_filter if s not in EVENT_STATUSES]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "Unknown status filter",
                "code": ErrorCodes.VALIDATION_ERROR,
                "details": [f"Unknown status: {s}" for s in unknown],
            },
        )
    return FilterSet.from_values(
        statuses=status_filter,
        categories=category,
        clients=client,
        employees=employee,
        my_events=mine,
        assigned_to_me=assigned,
    )


async def load_controller(
    store,
    employee_id: str | None,
    filters: FilterSet,
    request_log: RequestLog,
    view: ViewMode = ViewMode.MONTH,
    reference_date: date | None = None,
) -> CalendarController:
    """Load the snapshot for one request and apply the requested filters."""
    controller = CalendarController(store, current_user_id=employee_id, view=view, reference_date=reference_date)
    if employee_id:
        await controller.set_current_user(employee_id)
    await controller.refresh()
    if controller.load_error:
        raise StoreError(controller.load_error)

    if filters.clients and not controller.client_filter_available:
        request_log.details.append(("warning", "Client filter requires events_manage permission; ignored"))
        filters = replace(filters, clients=frozenset())
    for kind in ("statuses", "categories", "clients", "employees"):
        values = getattr(filters, kind)
        if values:
            request_log.details.append(("filter", f"{kind}={','.join(sorted(values))}"))

    controller.set_filters(filters)
    return controller


@router.get("", response_model=CalendarResponse)
async def get_calendar(
    request: Request,
    view: ViewMode = ViewMode.MONTH,
    reference_date: Annotated[date | None, Query(alias="date")] = None,
    filters: FilterSet = Depends(calendar_filters),
    employee_id: str | None = Depends(current_employee_id),
    store=Depends(get_store),
    _api_key: str = Depends(verify_api_key),
):
    """
    Render one calendar view.

    Returns the layout for the requested view and period with the visible
    and total event counts.
    """
    request_log = RequestLog(
        endpoint="/v1/calendar",
        method="GET",
        client_ip=get_client_ip(request),
        employee_id=employee_id,
        view=view.value,
    )

    with logged_request(request_log):
        controller = await load_controller(store, employee_id, filters, request_log, view, reference_date)

        request_log.status_code = 200
        request_log.events_returned = controller.visible_count
        return CalendarResponse(
            view=controller.view.value,
            reference_date=controller.reference_date.isoformat(),
            label=controller.label,
            visible_count=controller.visible_count,
            total_count=controller.total_count,
            active_filters=active_filter_count(controller.filters),
            status_counts=controller.status_counts(),
            layout=to_jsonable(controller.render()),
        )


@router.get("/filter-options", response_model=FilterOptionsResponse)
async def get_filter_options(
    request: Request,
    employee_id: str | None = Depends(current_employee_id),
    store=Depends(get_store),
    _api_key: str = Depends(verify_api_key),
):
    """Lookup tables for the filter panel."""
    request_log = RequestLog(
        endpoint="/v1/calendar/filter-options",
        method="GET",
        client_ip=get_client_ip(request),
        employee_id=employee_id,
    )

    with logged_request(request_log):
        controller = await load_controller(store, employee_id, FilterSet(), request_log)
        options = controller.filter_options

        request_log.status_code = 200
        return FilterOptionsResponse(
            categories=[to_jsonable(c) for c in options.categories],
            clients=[client_to_dict(c) for c in options.clients],
            employees=[
                {**to_jsonable(e), "display_name": e.display_name} for e in options.employees
            ],
            client_filter_available=controller.client_filter_available,
        )


@router.get("/day/{day}", response_model=DayEventsResponse)
async def get_day_events(
    request: Request,
    day: date,
    filters: FilterSet = Depends(calendar_filters),
    employee_id: str | None = Depends(current_employee_id),
    store=Depends(get_store),
    _api_key: str = Depends(verify_api_key),
):
    """All visible events of one date, in start order."""
    request_log = RequestLog(
        endpoint="/v1/calendar/day",
        method="GET",
        client_ip=get_client_ip(request),
        employee_id=employee_id,
        view="day-list",
    )

    with logged_request(request_log):
        controller = await load_controller(store, employee_id, filters, request_log, ViewMode.DAY, day)
        events = controller.show_all_events(day)

        request_log.status_code = 200
        request_log.events_returned = len(events)
        return DayEventsResponse(
            date=day.isoformat(),
            label=format_day_label(day),
            count=len(events),
            events=[item_to_dict(e) for e in events],
        )


@router.post("/events", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    request: Request,
    payload: EventCreate,
    employee_id: str | None = Depends(current_employee_id),
    store=Depends(get_store),
    _api_key: str = Depends(verify_api_key),
):
    """
    Create a business or individual event.

    Requires a session user with the event-creation capability.
    """
    request_log = RequestLog(
        endpoint="/v1/calendar/events",
        method="POST",
        client_ip=get_client_ip(request),
        employee_id=employee_id,
    )

    with logged_request(request_log):
        user = await fetch_current_user(store, employee_id)
        if not user.can_create_events:
            raise PermissionDeniedError("Creating events requires the events_manage permission")

        if not payload.created_by:
            payload = payload.model_copy(update={"created_by": employee_id})
        created = await store.create_event(payload)

        request_log.status_code = 201
        request_log.created_id = str(created["id"])
        return CreatedResponse(id=str(created["id"]), kind="event")


@router.post("/meetings", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    request: Request,
    payload: MeetingCreate,
    employee_id: str | None = Depends(current_employee_id),
    store=Depends(get_store),
    _api_key: str = Depends(verify_api_key),
):
    """Create a meeting. Any session user may create meetings."""
    request_log = RequestLog(
        endpoint="/v1/calendar/meetings",
        method="POST",
        client_ip=get_client_ip(request),
        employee_id=employee_id,
    )

    with logged_request(request_log):
        if not payload.created_by:
            payload = payload.model_copy(update={"created_by": employee_id})
        created = await store.create_meeting(payload)

        request_log.status_code = 201
        request_log.created_id = str(created["id"])
        return CreatedResponse(id=str(created["id"]), kind="meeting")
