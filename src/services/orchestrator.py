"""
Calendar controller: owns view state, filters and the event snapshot.

Every interaction goes through CalendarController. The snapshot is always
replaced wholesale and the visible events are recomputed from scratch, so
refreshing twice is the same as refreshing once.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date

from core.config import PERMISSION_EVENTS_MANAGE, TOOLTIP_DISMISS_DELAY_S
from core.exceptions import CalendarError, StoreWriteError
from models.events import CalendarItem, CurrentUser, FilterOptions
from models.filters import FilterSet, active_filter_count
from models.filters import clear_filters as cleared
from models.filters import toggle_filter as toggled
from models.payloads import EventCreate, MeetingCreate
from models.view_state import Direction, ViewMode, ViewState, advance_state
from models.view_state import go_today as reset_to_today
from models.view_state import set_view as switched_view
from services.calendar import fetch_calendar_events, fetch_current_user, fetch_filter_options
from services.calendar_utils import events_for_date, sort_by_start
from services.employee_view import render_employees
from services.filters import apply_filters
from services.month_view import render_month
from services.summary import (
    MeetingSummary,
    Navigate,
    Tooltip,
    click_outcome,
    status_counts,
    tooltip_for,
    upcoming_events,
)
from services.time_grid import render_day, render_week
from services.wizards import CreationType, EventWizard, MeetingForm, creation_options

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Nie udało się załadować wydarzeń"


@dataclass(frozen=True)
class Notification:
    level: str  # "success" or "error"
    message: str


@dataclass(frozen=True)
class HoverState:
    event: CalendarItem
    tooltip: Tooltip
    position: tuple[float, float] | None = None


class CalendarController:
    """Single-session calendar state container."""

    def __init__(
        self,
        store,
        current_user_id: str | None = None,
        view: ViewMode | str = ViewMode.MONTH,
        reference_date: date | None = None,
        today: date | None = None,
        locale: str | None = None,
    ):
        self.store = store
        self.locale = locale
        self._today = today
        self.state = ViewState(reference_date=reference_date or self.today, view=ViewMode(view))
        self.filters = FilterSet()
        self.current_user = CurrentUser(id=current_user_id)

        self.all_events: tuple[CalendarItem, ...] = ()
        self.events: tuple[CalendarItem, ...] = ()
        self.filter_options = FilterOptions()
        self.loading = False
        self.load_error: str | None = None

        self.selected_date: date | None = None
        self.type_selector_open = False
        self.wizard: EventWizard | MeetingForm | None = None
        self.hover: HoverState | None = None
        self.all_events_date: date | None = None
        self.meeting_summary: MeetingSummary | None = None
        self.notifications: list[Notification] = []

        self._unsubscribe = None
        self._unmounted = False
        self._dismiss_handle: asyncio.TimerHandle | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def today(self) -> date:
        return self._today or date.today()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def mounted(self):
        """
        Subscribe to store changes and load; always unsubscribes on exit.

        Usage:
            async with controller.mounted():
                layout = controller.render()
        """
        self._unmounted = False
        self._unsubscribe = self.store.subscribe_to_event_changes(self._on_change)
        try:
            if self.current_user.id:
                await self.set_current_user(self.current_user.id)
            await self.refresh()
            yield self
        finally:
            self._unmounted = True
            self._unsubscribe()
            self._unsubscribe = None
            self._cancel_dismiss()
            for task in list(self._pending):
                task.cancel()
            self._pending.clear()

    def _on_change(self, change: dict) -> None:
        if self._unmounted:
            return
        logger.debug("Store change %s; refreshing", change)
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def refresh(self) -> None:
        """Refetch the snapshot and lookup tables; failures leave an empty calendar."""
        self.loading = True
        try:
            events = await fetch_calendar_events(self.store)
            options = await fetch_filter_options(self.store)
        except CalendarError:
            logger.exception("Failed to load calendar events")
            if self._unmounted:
                return
            self.all_events = ()
            self.filter_options = FilterOptions()
            self.load_error = LOAD_ERROR_MESSAGE
        else:
            if self._unmounted:
                return
            self.all_events = events
            self.filter_options = options
            self.load_error = None
        finally:
            self.loading = False
        self._recompute()

    def _recompute(self) -> None:
        self.events = apply_filters(self.all_events, self.filters, self.current_user.id)

    # -------------------------------------------------------------------------
    # View state and filters
    # -------------------------------------------------------------------------

    @property
    def view(self) -> ViewMode:
        return self.state.view

    @property
    def reference_date(self) -> date:
        return self.state.reference_date

    @property
    def label(self) -> str:
        return self.state.label(self.locale)

    def advance(self, direction: Direction | str) -> date:
        self.state = advance_state(self.state, direction)
        return self.state.reference_date

    def go_today(self) -> date:
        self.state = reset_to_today(self.state, self.today)
        return self.state.reference_date

    def set_view(self, view: ViewMode | str) -> None:
        self.state = switched_view(self.state, view)

    def toggle_filter(self, kind: str, value: str | None = None) -> None:
        self.filters = toggled(self.filters, kind, value)
        self._recompute()

    def clear_filters(self) -> None:
        self.filters = cleared()
        self._recompute()

    def set_filters(self, filters: FilterSet) -> None:
        self.filters = filters
        self._recompute()

    async def set_current_user(self, user_id: str | None) -> None:
        """Switch the session user; capabilities fall back to none on error."""
        try:
            self.current_user = await fetch_current_user(self.store, user_id)
        except CalendarError:
            logger.exception("Failed to load capabilities for %s", user_id)
            self.current_user = CurrentUser(id=user_id)
        self._recompute()

    @property
    def active_filter_count(self) -> int:
        return active_filter_count(self.filters)

    @property
    def client_filter_available(self) -> bool:
        return PERMISSION_EVENTS_MANAGE in self.current_user.permissions

    @property
    def visible_count(self) -> int:
        return len(self.events)

    @property
    def total_count(self) -> int:
        return len(self.all_events)

    @property
    def count_label(self) -> str:
        return f"Wyświetlono {self.visible_count} z {self.total_count} wydarzeń"

    def status_counts(self) -> dict[str, int]:
        return status_counts(self.events)

    def upcoming(self, now=None) -> list[CalendarItem]:
        return upcoming_events(self.events, now)

    def render(self):
        """Layout for the active view, built from the visible events."""
        view, ref = self.state.view, self.state.reference_date
        if view is ViewMode.WEEK:
            return render_week(ref, self.events, self.today, self.locale)
        if view is ViewMode.DAY:
            return render_day(ref, self.events, self.today, self.locale)
        if view is ViewMode.EMPLOYEE:
            return render_employees(ref, self.events, self.filter_options.employees, self.locale)
        return render_month(ref, self.events, self.today, self.locale)

    # -------------------------------------------------------------------------
    # Interaction
    # -------------------------------------------------------------------------

    def click_event(self, event: CalendarItem) -> MeetingSummary | Navigate:
        outcome = click_outcome(event)
        if isinstance(outcome, MeetingSummary):
            self.meeting_summary = outcome
        return outcome

    def close_meeting_summary(self) -> None:
        self.meeting_summary = None

    def click_date(self, d: date) -> list[CreationType]:
        return self.open_new(d)

    def open_new(self, d: date | None = None) -> list[CreationType]:
        """Open creation; users without the capability go straight to the meeting form."""
        self.selected_date = d or self.state.reference_date
        options = creation_options(self.current_user.can_create_events)
        if options == [CreationType.MEETING]:
            self.type_selector_open = False
            self.wizard = MeetingForm(initial_date=self.selected_date, created_by=self.current_user.id)
        else:
            self.type_selector_open = True
            self.wizard = None
        return options

    def choose_type(self, creation_type: CreationType | str) -> EventWizard | MeetingForm:
        creation_type = CreationType(creation_type)
        if creation_type not in creation_options(self.current_user.can_create_events):
            raise ValueError(f"Creation type '{creation_type.value}' is not available")
        self.type_selector_open = False
        if creation_type is CreationType.MEETING:
            self.wizard = MeetingForm(initial_date=self.selected_date, created_by=self.current_user.id)
        else:
            self.wizard = EventWizard(creation_type, initial_date=self.selected_date, created_by=self.current_user.id)
        return self.wizard

    def close_wizard(self) -> None:
        self.type_selector_open = False
        self.wizard = None

    def hover_event(self, event: CalendarItem | None, position: tuple[float, float] | None = None) -> None:
        """Show the tooltip now; hovering off schedules dismissal."""
        self._cancel_dismiss()
        if event is None:
            loop = asyncio.get_running_loop()
            self._dismiss_handle = loop.call_later(TOOLTIP_DISMISS_DELAY_S, self._dismiss_tooltip)
            return
        self.hover = HoverState(event=event, tooltip=tooltip_for(event, self.locale), position=position)

    def enter_tooltip(self) -> None:
        self._cancel_dismiss()

    def leave_tooltip(self) -> None:
        self._cancel_dismiss()
        self.hover = None

    def _dismiss_tooltip(self) -> None:
        self._dismiss_handle = None
        self.hover = None

    def _cancel_dismiss(self) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None

    def show_all_events(self, d: date) -> list[CalendarItem]:
        self.all_events_date = d
        return sort_by_start(events_for_date(d, self.events))

    def close_all_events(self) -> None:
        self.all_events_date = None

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    def pop_notifications(self) -> list[Notification]:
        notifications, self.notifications = self.notifications, []
        return notifications

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def submit_event(self, payload: EventCreate | None = None) -> dict | None:
        """
        Create an event from `payload`, or from the open wizard.

        On failure the wizard stays open and an error notification is pushed.
        """
        if not self.current_user.can_create_events:
            logger.warning("User %s tried to create an event without permission", self.current_user.id)
            self.notify("error", "Brak uprawnień do tworzenia wydarzeń")
            return None
        return await self._submit(
            EventWizard,
            payload,
            self.store.create_event,
            success="Wydarzenie zostało utworzone",
            failure="Nie udało się utworzyć wydarzenia",
        )

    async def submit_meeting(self, payload: MeetingCreate | None = None) -> dict | None:
        """Create a meeting from `payload`, or from the open form."""
        return await self._submit(
            MeetingForm,
            payload,
            self.store.create_meeting,
            success="Spotkanie zostało utworzone",
            failure="Nie udało się utworzyć spotkania",
        )

    async def _submit(self, kind, payload, create, success: str, failure: str) -> dict | None:
        if payload is None:
            if not isinstance(self.wizard, kind):
                raise ValueError(f"No open {kind.__name__} to submit")
            wizard = self.wizard
            created = await wizard.submit(self.store)
            if created is None:
                if wizard.error:
                    self.notify("error", f"{failure}: {wizard.error}")
                return None
        else:
            try:
                created = await create(payload)
            except StoreWriteError as e:
                logger.error("Creation failed: %s", e)
                self.notify("error", f"{failure}: {e}")
                return None

        self.close_wizard()
        self.notify("success", success)
        await self.refresh()
        return created
