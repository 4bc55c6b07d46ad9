"""Tests for the calendar controller."""

import asyncio
import logging
import sqlite3
from datetime import date, datetime

import pytest

from core.database import SQLiteEventStore
from models.filters import FilterSet
from models.payloads import EventCreate, MeetingCreate
from models.view_state import ViewMode
from services.employee_view import EmployeeBoard
from services.month_view import MonthGrid
from services.orchestrator import LOAD_ERROR_MESSAGE, CalendarController
from services.summary import MeetingSummary, Navigate
from services.time_grid import WeekGrid
from services.wizards import CreationType, EventWizard, MeetingForm

TODAY = date(2025, 3, 10)


@pytest.mark.asyncio
async def test_mount_loads_and_unsubscribes(controller, store):
    async with controller.mounted():
        assert store.feed.subscriber_count == 1
        assert controller.total_count == 5
        assert controller.visible_count == 5
        assert controller.load_error is None
        assert len(controller.filter_options.employees) == 3

    assert store.feed.subscriber_count == 0


@pytest.mark.asyncio
async def test_refresh_is_idempotent(controller):
    await controller.refresh()
    first = controller.events
    await controller.refresh()

    assert controller.events == first
    assert controller.count_label == "Wyświetlono 5 z 5 wydarzeń"


@pytest.mark.asyncio
async def test_load_failure_shows_empty_calendar(controller, store):
    await controller.refresh()
    store.fail_reads = True

    await controller.refresh()

    assert controller.all_events == ()
    assert controller.events == ()
    assert controller.load_error == LOAD_ERROR_MESSAGE
    assert not controller.loading
    assert controller.filter_options.employees == ()

    store.fail_reads = False
    await controller.refresh()
    assert controller.load_error is None
    assert controller.total_count == 5


@pytest.mark.asyncio
async def test_store_change_triggers_refresh(controller, store):
    async with controller.mounted():
        assert store.fetch_count == 1
        store.records.append(
            {"id": "ev9", "name": "Dodane z zewnątrz", "event_date": "2025-03-21T10:00:00", "status": "inquiry"}
        )
        store.feed.publish({"table": "events", "type": "INSERT", "id": "ev9"})
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert store.fetch_count == 2
        assert controller.total_count == 6


@pytest.mark.asyncio
async def test_no_refresh_after_unmount(controller, store):
    async with controller.mounted():
        pass

    store.feed.publish({"table": "events", "type": "INSERT", "id": "x"})
    await asyncio.sleep(0)

    assert store.fetch_count == 1


@pytest.mark.asyncio
async def test_filters_recompute_visible_events(controller):
    await controller.refresh()

    controller.toggle_filter("statuses", "offer_sent")
    assert [e.id for e in controller.events] == ["ev1", "ev4"]
    assert controller.active_filter_count == 1
    assert controller.count_label == "Wyświetlono 2 z 5 wydarzeń"

    controller.toggle_filter("categories", "c1")
    assert [e.id for e in controller.events] == ["ev1", "ev4"]

    controller.clear_filters()
    assert controller.visible_count == 5


@pytest.mark.asyncio
async def test_self_filters_need_a_user(controller):
    await controller.refresh()
    controller.set_filters(FilterSet(my_events=True))
    assert controller.visible_count == 5

    await controller.set_current_user("e1")
    assert [e.id for e in controller.events] == ["ev2", "m1", "ev3"]


@pytest.mark.asyncio
async def test_set_current_user_capabilities(controller):
    await controller.set_current_user("e1")
    assert controller.current_user.can_create_events
    assert controller.client_filter_available

    await controller.set_current_user("e3")
    assert not controller.current_user.can_create_events
    assert not controller.client_filter_available


@pytest.mark.asyncio
async def test_navigation_keeps_view_and_filters(controller):
    await controller.refresh()
    controller.set_view("week")
    controller.toggle_filter("statuses", "completed")

    assert controller.advance("next") == date(2025, 3, 17)
    assert controller.view is ViewMode.WEEK
    assert controller.filters.statuses == {"completed"}

    controller.set_view(ViewMode.MONTH)
    assert controller.advance("prev") == date(2025, 2, 17)
    assert controller.go_today() == TODAY
    assert controller.label == "marzec 2025"

    controller.locale = "en"
    assert controller.label == "March 2025"


@pytest.mark.asyncio
async def test_render_follows_view(controller):
    await controller.refresh()

    assert isinstance(controller.render(), MonthGrid)
    controller.set_view("week")
    assert isinstance(controller.render(), WeekGrid)
    controller.set_view("employee")
    assert isinstance(controller.render(), EmployeeBoard)


@pytest.mark.asyncio
async def test_status_counts_and_upcoming(controller):
    await controller.refresh()
    controller.toggle_filter("statuses", "offer_sent")

    assert controller.status_counts()["offer_sent"] == 2
    assert controller.status_counts()["completed"] == 0
    assert [e.id for e in controller.upcoming(datetime(2025, 3, 11))] == ["ev4"]


@pytest.mark.asyncio
async def test_click_event(controller, events_by_id):
    outcome = controller.click_event(events_by_id["m1"])

    assert isinstance(outcome, MeetingSummary)
    assert controller.meeting_summary == outcome
    controller.close_meeting_summary()
    assert controller.meeting_summary is None

    assert controller.click_event(events_by_id["ev1"]) == Navigate(event_id="ev1")
    assert controller.meeting_summary is None


@pytest.mark.asyncio
async def test_show_all_events(controller):
    await controller.refresh()

    day_events = controller.show_all_events(TODAY)

    assert [e.id for e in day_events] == ["ev1", "ev2", "m1"]
    assert controller.all_events_date == TODAY
    controller.close_all_events()
    assert controller.all_events_date is None


class TestCreation:
    @pytest.mark.asyncio
    async def test_meeting_only_without_capability(self, controller):
        await controller.set_current_user("e3")

        options = controller.click_date(date(2025, 3, 12))

        assert options == [CreationType.MEETING]
        assert not controller.type_selector_open
        assert isinstance(controller.wizard, MeetingForm)
        assert controller.wizard.data["datetime_start"] == datetime(2025, 3, 12)
        assert controller.wizard.data["created_by"] == "e3"

    @pytest.mark.asyncio
    async def test_type_selector_with_capability(self, controller):
        await controller.set_current_user("e1")

        options = controller.open_new(date(2025, 3, 12))

        assert len(options) == 3
        assert controller.type_selector_open
        wizard = controller.choose_type("individual")
        assert isinstance(wizard, EventWizard)
        assert wizard.client_type is CreationType.INDIVIDUAL
        assert not controller.type_selector_open

    @pytest.mark.asyncio
    async def test_unavailable_type_is_rejected(self, controller):
        await controller.set_current_user("e3")
        controller.open_new(TODAY)

        with pytest.raises(ValueError):
            controller.choose_type(CreationType.BUSINESS)

    @pytest.mark.asyncio
    async def test_submit_event_success(self, controller, store):
        await controller.set_current_user("e1")
        async with controller.mounted():
            controller.open_new(date(2025, 3, 12))
            controller.choose_type("business")
            controller.wizard.update(organization_id="o1", name="Nowe wydarzenie")

            created = await controller.submit_event()

            assert created["id"] == "new1"
            assert controller.wizard is None
            assert controller.total_count == 6
            assert [n.level for n in controller.pop_notifications()] == ["success"]
            assert controller.notifications == []

    @pytest.mark.asyncio
    async def test_submit_event_failure_keeps_wizard(self, controller, store):
        await controller.set_current_user("e1")
        await controller.refresh()
        controller.open_new(date(2025, 3, 12))
        wizard = controller.choose_type("business")
        wizard.update(organization_id="o1", name="Nowe wydarzenie")
        store.fail_writes = True

        assert await controller.submit_event() is None

        assert controller.wizard is wizard
        assert wizard.data["name"] == "Nowe wydarzenie"
        assert controller.total_count == 5
        notifications = controller.pop_notifications()
        assert notifications[0].level == "error"
        assert "disk full" in notifications[0].message

    @pytest.mark.asyncio
    async def test_submit_event_without_capability(self, controller, store):
        await controller.set_current_user("e3")
        payload = EventCreate(name="Nowe", event_date=datetime(2025, 3, 12, 10))

        assert await controller.submit_event(payload) is None
        assert store.created == []
        assert controller.pop_notifications()[0].level == "error"

    @pytest.mark.asyncio
    async def test_submit_invalid_wizard(self, controller, store):
        await controller.set_current_user("e1")
        controller.open_new(date(2025, 3, 12))
        wizard = controller.choose_type("business")

        assert await controller.submit_event() is None
        assert wizard.errors
        assert store.created == []

    @pytest.mark.asyncio
    async def test_submit_business_event_requires_organization(self, controller, store):
        await controller.set_current_user("e1")
        controller.open_new(date(2025, 3, 12))
        wizard = controller.choose_type("business")
        wizard.update(name="Bez klienta")

        assert await controller.submit_event() is None

        assert wizard.errors == ["organization_id: Field required"]
        assert controller.wizard is wizard
        assert store.created == []

    @pytest.mark.asyncio
    async def test_unreachable_database_keeps_form_open(self, tmp_path):
        controller = CalendarController(
            SQLiteEventStore(tmp_path / "missing_dir" / "calendar.db"), reference_date=TODAY, today=TODAY
        )
        controller.open_new(TODAY)
        form = controller.wizard
        form.update(title="Spotkanie")

        assert await controller.submit_meeting() is None

        assert controller.wizard is form
        assert "unable to open database file" in form.error
        notifications = controller.pop_notifications()
        assert [n.level for n in notifications] == ["error"]
        assert notifications[0].message.startswith("Nie udało się utworzyć spotkania")

    @pytest.mark.asyncio
    async def test_submit_meeting(self, controller, store):
        await controller.set_current_user("e3")
        await controller.refresh()
        payload = MeetingCreate(title="Sync", datetime_start=datetime(2025, 3, 12, 10), created_by="e3")

        created = await controller.submit_meeting(payload)

        assert created == {"id": "m-new1", "title": "Sync"}
        assert controller.total_count == 6

    @pytest.mark.asyncio
    async def test_close_wizard(self, controller):
        controller.open_new(TODAY)
        controller.close_wizard()

        assert controller.wizard is None
        assert not controller.type_selector_open


class TestHover:
    @pytest.mark.asyncio
    async def test_tooltip_shows_immediately(self, controller, events_by_id):
        controller.hover_event(events_by_id["ev1"], (10, 20))

        assert controller.hover.tooltip.when == "10 mar, 09:00"
        assert controller.hover.position == (10, 20)

    @pytest.mark.asyncio
    async def test_leaving_dismisses_after_delay(self, controller, events_by_id):
        controller.hover_event(events_by_id["ev1"])
        controller.hover_event(None)

        assert controller.hover is not None
        await asyncio.sleep(0.15)
        assert controller.hover is None

    @pytest.mark.asyncio
    async def test_entering_tooltip_cancels_dismissal(self, controller, events_by_id):
        controller.hover_event(events_by_id["ev1"])
        controller.hover_event(None)
        controller.enter_tooltip()

        await asyncio.sleep(0.15)
        assert controller.hover is not None

        controller.leave_tooltip()
        assert controller.hover is None


@pytest.mark.asyncio
async def test_malformed_stored_json_does_not_abort_load(db_path, caplog):
    conn = sqlite3.connect(db_path)
    conn.execute("UPDATE events SET attachments = 'not json' WHERE id = 1")
    conn.execute("UPDATE meetings SET related_event_ids = '[1,' WHERE id = 1")
    conn.commit()
    conn.close()
    controller = CalendarController(SQLiteEventStore(db_path), reference_date=TODAY, today=TODAY)

    with caplog.at_level(logging.WARNING):
        await controller.refresh()

    assert controller.load_error is None
    assert controller.total_count == 3
    gala = next(e for e in controller.events if e.name == "Gala firmowa")
    assert gala.attachments == ()
    assert "Ignoring malformed attachments on row 1" in caplog.text
