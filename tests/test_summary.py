"""Tests for tooltips, meeting summaries and aggregate statistics."""

from datetime import datetime

from core.config import EVENT_STATUSES
from models.events import Meeting
from services.summary import (
    Navigate,
    click_outcome,
    meeting_summary,
    status_color,
    status_counts,
    status_label,
    tooltip_for,
    upcoming_events,
)


def test_tooltip_for_event(events_by_id):
    tooltip = tooltip_for(events_by_id["ev1"], "pl")

    assert tooltip.title == "Gala firmowa"
    assert tooltip.client == "ACME"
    assert tooltip.when == "10 mar, 09:00"
    assert tooltip.location == "Warszawa"
    assert tooltip.status_label == "Oferta wysłana"


def test_tooltip_for_individual_client(events_by_id):
    assert tooltip_for(events_by_id["ev2"]).client == "Jan Kowalski"


def test_status_labels(events_by_id):
    assert status_label(events_by_id["ev2"]) == "Zrealizowany"
    assert status_label(events_by_id["ev3"]) == "Nieznany status"
    assert status_label(events_by_id["m1"]) is None


def test_status_color_prefers_category(events_by_id):
    assert status_color(events_by_id["ev1"]) == "#3B82F6"
    assert status_color(events_by_id["ev2"]) == "#10B981"
    assert status_color(events_by_id["ev3"]) == "#6B7280"


def test_meeting_summary(events_by_id):
    summary = meeting_summary(events_by_id["m1"])

    assert summary.title == "Spotkanie z klientem"
    assert summary.when == "10.03.2025, 14:00"
    assert summary.location == "Biuro"
    assert summary.notes == "Omówić ofertę"
    assert "Notatki: Omówić ofertę" in summary.as_text()


def test_meeting_summary_placeholders():
    meeting = Meeting(id="m9", name="Krótkie", start=datetime(2025, 3, 10, 8))
    summary = meeting_summary(meeting)

    assert summary.location == "Brak"
    assert summary.notes == "Brak"


def test_click_outcome(events_by_id):
    assert click_outcome(events_by_id["ev1"]) == Navigate(event_id="ev1")
    assert click_outcome(events_by_id["m1"]).meeting_id == "m1"


def test_status_counts_zero_filled(events):
    counts = status_counts(events)

    assert list(counts) == list(EVENT_STATUSES)
    assert counts["offer_sent"] == 2
    assert counts["completed"] == 1
    assert counts["inquiry"] == 0
    assert sum(counts.values()) == 3


def test_upcoming_events(events):
    upcoming = upcoming_events(events, now=datetime(2025, 3, 10, 12, 0), limit=2)
    assert [e.id for e in upcoming] == ["ev2", "m1"]


def test_upcoming_events_default_limit(events):
    upcoming = upcoming_events(events, now=datetime(2025, 1, 1))
    assert len(upcoming) == 5
