"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.changes import ChangeFeed
from core.database import create_schema, get_connection
from core.exceptions import StoreError, StoreWriteError
from services.calendar import parse_filter_options, parse_records
from services.orchestrator import CalendarController

TODAY = date(2025, 3, 10)


class FakeStore:
    """In-memory EventStore with switchable read/write failures."""

    def __init__(self, records=None, options=None, capabilities=None):
        self.records = list(records or [])
        self.options = options or {"categories": [], "clients": [], "employees": []}
        self.capabilities = capabilities or {}
        self.feed = ChangeFeed()
        self.fetch_count = 0
        self.fail_reads = False
        self.fail_writes = False
        self.created = []

    async def fetch_events(self):
        self.fetch_count += 1
        if self.fail_reads:
            raise StoreError("database is locked")
        return [dict(record) for record in self.records]

    async def fetch_filter_options(self):
        if self.fail_reads:
            raise StoreError("database is locked")
        return self.options

    def subscribe_to_event_changes(self, callback):
        return self.feed.subscribe(callback)

    async def create_event(self, payload):
        if self.fail_writes:
            raise StoreWriteError("disk full")
        event_id = f"new{len(self.created) + 1}"
        self.created.append(payload)
        self.records.append(
            {
                "id": event_id,
                "name": payload.name,
                "event_date": payload.event_date.isoformat(),
                "event_end_date": payload.event_end_date.isoformat() if payload.event_end_date else None,
                "status": payload.status,
                "created_by": payload.created_by,
            }
        )
        self.feed.publish({"table": "events", "type": "INSERT", "id": event_id})
        return {"id": event_id, "name": payload.name}

    async def create_meeting(self, payload):
        if self.fail_writes:
            raise StoreWriteError("disk full")
        meeting_id = f"m-new{len(self.created) + 1}"
        self.created.append(payload)
        self.records.append(
            {
                "id": meeting_id,
                "is_meeting": True,
                "title": payload.title,
                "datetime_start": payload.datetime_start.isoformat(),
                "created_by": payload.created_by,
            }
        )
        self.feed.publish({"table": "meetings", "type": "INSERT", "id": meeting_id})
        return {"id": meeting_id, "title": payload.title}

    async def current_user_capabilities(self, user_id):
        return self.capabilities.get(
            user_id, {"id": user_id, "can_create_events": False, "permissions": []}
        )


@pytest.fixture
def sample_records():
    """Raw store records for March 2025 (three items on the 10th)."""
    return [
        {
            "id": "ev1",
            "name": "Gala firmowa",
            "event_date": "2025-03-10T09:00:00",
            "event_end_date": "2025-03-10T10:30:00",
            "status": "offer_sent",
            "organization": {"id": "o1", "name": "Acme Sp. z o.o.", "alias": "ACME"},
            "category": {"id": "c1", "name": "Konferencja", "color": "#3B82F6"},
            "location": "Warszawa",
            "budget": 1000,
            "created_by": "e2",
            "employees": [{"employee_id": "e1", "role": "Kierownik", "hours": 4}],
            "equipment": [{"name": "Mikser", "quantity": 2}],
        },
        {
            "id": "ev2",
            "name": "Koncert plenerowy",
            "event_date": "2025-03-10T14:00:00",
            "event_end_date": "2025-03-10T16:00:00",
            "status": "completed",
            "contact": {"id": "p1", "full_name": "Jan Kowalski"},
            "category": {"id": "c2", "name": "Koncert"},
            "budget": 500,
            "created_by": "e1",
            "employees": [{"employee_id": "e2", "role": "Technik"}],
        },
        {
            "id": "m1",
            "is_meeting": True,
            "title": "Spotkanie z klientem",
            "datetime_start": "2025-03-10T14:00:00",
            "datetime_end": "2025-03-10T15:00:00",
            "location_text": "Biuro",
            "notes": "Omówić ofertę",
            "created_by": "e1",
            "participants": [{"employee_id": "e1"}, {"contact_id": "p1"}],
        },
        {
            "id": "ev3",
            "name": "Wesele",
            "event_date": "2025-03-12T18:00:00",
            "status": "archived_legacy",
            "created_by": "e1",
        },
        {
            "id": "ev4",
            "name": "Konferencja branżowa",
            "event_date": "2025-03-20T09:00:00",
            "event_end_date": "2025-03-20T17:00:00",
            "status": "offer_sent",
            "organization": {"id": "o2", "name": "Beta"},
            "category": {"id": "c1", "name": "Konferencja", "color": "#3B82F6"},
            "created_by": "e3",
            "employees": [{"employee_id": "e3", "role": "Obsługa"}],
        },
    ]


@pytest.fixture
def sample_options():
    """Lookup tables matching sample_records."""
    return {
        "categories": [
            {"id": "c1", "name": "Konferencja", "color": "#3B82F6"},
            {"id": "c2", "name": "Koncert", "color": None},
        ],
        "clients": [
            {"id": "o1", "name": "Acme Sp. z o.o.", "alias": "ACME", "type": "organization"},
            {"id": "o2", "name": "Beta", "alias": None, "type": "organization"},
            {"id": "p1", "name": "Jan Kowalski", "alias": None, "type": "individual"},
        ],
        "employees": [
            {"id": "e1", "name": "Anna", "surname": "Nowak", "nickname": "Ania"},
            {"id": "e2", "name": "Piotr", "surname": "Kowalski", "nickname": None},
            {"id": "e3", "name": "Marta", "surname": "Wiśniewska", "nickname": None},
        ],
    }


@pytest.fixture
def sample_capabilities():
    return {
        "e1": {"id": "e1", "can_create_events": True, "permissions": ["events_manage"]},
        "e3": {"id": "e3", "can_create_events": False, "permissions": []},
    }


@pytest.fixture
def events(sample_records):
    """Parsed calendar items, ordered by start."""
    return parse_records(sample_records)


@pytest.fixture
def events_by_id(events):
    return {event.id: event for event in events}


@pytest.fixture
def filter_options(sample_options):
    return parse_filter_options(sample_options)


@pytest.fixture
def store(sample_records, sample_options, sample_capabilities):
    return FakeStore(sample_records, sample_options, sample_capabilities)


@pytest.fixture
def controller(store):
    return CalendarController(store, reference_date=TODAY, today=TODAY, locale="pl")


@pytest.fixture
def db_path(tmp_path):
    """Seeded SQLite calendar database (two events, one meeting)."""
    path = tmp_path / "calendar.db"
    conn = get_connection(path)
    create_schema(conn)
    cursor = conn.cursor()
    cursor.execute("INSERT INTO event_categories (name, color) VALUES ('Konferencja', '#3B82F6')")
    cursor.execute("INSERT INTO organizations (name, alias) VALUES ('Acme Sp. z o.o.', 'ACME')")
    cursor.execute("INSERT INTO contacts (first_name, last_name) VALUES ('Jan', 'Kowalski')")
    cursor.executemany(
        "INSERT INTO employees (id, name, surname, nickname, permissions) VALUES (?, ?, ?, ?, ?)",
        [
            ("e1", "Anna", "Nowak", "Ania", "events_manage"),
            ("e2", "Piotr", "Kowalski", None, "admin, reports"),
            ("e3", "Marta", "Wiśniewska", None, ""),
        ],
    )
    cursor.execute(
        """
        INSERT INTO events (name, organization_id, category_id, event_date, event_end_date,
                            status, budget, attachments, created_by)
        VALUES ('Gala firmowa', 1, 1, '2025-03-10T09:00:00', '2025-03-10T10:30:00',
                'offer_sent', 1000, '["umowa.pdf"]', 'e2')
        """
    )
    cursor.execute(
        "INSERT INTO employee_assignments (event_id, employee_id, role, hours) VALUES (1, 'e1', 'Kierownik', 4)"
    )
    cursor.execute("INSERT INTO event_equipment (event_id, name, quantity) VALUES (1, 'Mikser', 2)")
    cursor.execute(
        """
        INSERT INTO events (name, contact_person_id, event_date, status, created_by)
        VALUES ('Wesele', 1, '2025-03-12T18:00:00', 'archived_legacy', 'e1')
        """
    )
    cursor.execute(
        """
        INSERT INTO meetings (title, datetime_start, datetime_end, location_text, notes, created_by)
        VALUES ('Spotkanie z klientem', '2025-03-10T14:00:00', '2025-03-10T15:00:00', 'Biuro', 'Omówić ofertę', 'e1')
        """
    )
    cursor.execute("INSERT INTO meeting_participants (meeting_id, employee_id) VALUES (1, 'e1')")
    cursor.execute("INSERT INTO meeting_participants (meeting_id, contact_id) VALUES (1, 1)")
    conn.commit()
    conn.close()
    return path
