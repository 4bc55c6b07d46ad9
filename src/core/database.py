"""
SQLite event store: schema, reads, writes and change notifications.
"""

import asyncio
import json
import logging
import sqlite3
from pathlib import Path
from typing import Callable, Protocol

from core.changes import ChangeCallback, ChangeFeed
from core.config import DB_PATH, EVENT_CREATE_PERMISSIONS
from core.exceptions import StoreError, StoreWriteError
from models.payloads import EventCreate, MeetingCreate

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    """Queryable collection the calendar reads from and writes to."""

    async def fetch_events(self) -> list[dict]: ...

    async def fetch_filter_options(self) -> dict: ...

    def subscribe_to_event_changes(self, callback: ChangeCallback) -> Callable[[], None]: ...

    async def create_event(self, payload: EventCreate) -> dict: ...

    async def create_meeting(self, payload: MeetingCreate) -> dict: ...

    async def current_user_capabilities(self, user_id: str) -> dict: ...


# =============================================================================
# SCHEMA
# =============================================================================

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS event_categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL,
        color TEXT,
        icon_svg TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS organizations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        alias TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS contacts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS employees (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        surname TEXT,
        nickname TEXT,
        permissions TEXT DEFAULT ''
    )
    """,
    # No CHECK on status: legacy rows with retired codes must still load
    """
    CREATE TABLE IF NOT EXISTS events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        organization_id INTEGER,
        contact_person_id INTEGER,
        category_id INTEGER,
        event_date TEXT NOT NULL,
        event_end_date TEXT,
        location TEXT,
        description TEXT,
        status TEXT NOT NULL DEFAULT 'inquiry',
        budget REAL,
        final_cost REAL,
        attachments TEXT,
        created_by TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (organization_id) REFERENCES organizations(id),
        FOREIGN KEY (contact_person_id) REFERENCES contacts(id),
        FOREIGN KEY (category_id) REFERENCES event_categories(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS employee_assignments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id INTEGER NOT NULL,
        employee_id TEXT NOT NULL,
        role TEXT,
        hours REAL,
        status TEXT,
        FOREIGN KEY (event_id) REFERENCES events(id),
        FOREIGN KEY (employee_id) REFERENCES employees(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS event_equipment (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        quantity INTEGER NOT NULL DEFAULT 1,
        FOREIGN KEY (event_id) REFERENCES events(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS event_vehicles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        FOREIGN KEY (event_id) REFERENCES events(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS event_tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        status TEXT,
        FOREIGN KEY (event_id) REFERENCES events(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS meetings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        datetime_start TEXT NOT NULL,
        datetime_end TEXT,
        is_all_day INTEGER NOT NULL DEFAULT 0,
        color TEXT,
        notes TEXT,
        location_text TEXT,
        related_event_ids TEXT,
        created_by TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS meeting_participants (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        meeting_id INTEGER NOT NULL,
        employee_id TEXT,
        contact_id INTEGER,
        FOREIGN KEY (meeting_id) REFERENCES meetings(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        employee_id TEXT,
        view TEXT,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL,
        events_returned INTEGER,
        created_id TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'filter', 'warning')),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_event_date ON events(event_date)",
    "CREATE INDEX IF NOT EXISTS idx_meetings_start ON meetings(datetime_start)",
    "CREATE INDEX IF NOT EXISTS idx_assignments_event ON employee_assignments(event_id)",
    "CREATE INDEX IF NOT EXISTS idx_participants_meeting ON meeting_participants(meeting_id)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)",
    "CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id)",
]


def get_connection(db_path: Path | str = DB_PATH) -> sqlite3.Connection:
    """Get a database connection with dict-like rows."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they don't exist."""
    cursor = conn.cursor()
    for statement in SCHEMA:
        cursor.execute(statement)
    conn.commit()


def _group_by(rows, key: str) -> dict:
    grouped = {}
    for row in rows:
        grouped.setdefault(row[key], []).append(dict(row))
    return grouped


def _json_list(raw: str | None, column: str, row_id) -> list:
    """Decode a JSON list column; a malformed value reads as empty."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring malformed %s on row %s: %s", column, row_id, e)
        return []
    if not isinstance(value, list):
        logger.warning("Ignoring non-list %s on row %s", column, row_id)
        return []
    return value


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


# =============================================================================
# STORE
# =============================================================================


class SQLiteEventStore:
    """
    EventStore backed by the calendar SQLite database.

    Blocking queries run in a worker thread. Successful writes are published
    on the change feed, and watch_external_changes() picks up commits made
    by other processes.
    """

    def __init__(self, db_path: Path | str = DB_PATH, feed: ChangeFeed | None = None):
        self.db_path = db_path
        self.feed = feed or ChangeFeed()

    def connect(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    def _open(self, error_class=StoreError) -> sqlite3.Connection:
        """Connect, raising error_class if the database file cannot be opened."""
        try:
            return self.connect()
        except sqlite3.Error as e:
            raise error_class(f"Cannot open database {self.db_path}: {e}") from e

    def ping(self) -> bool:
        """True if the database opens and has the events table."""
        try:
            conn = self.connect()
            try:
                conn.execute("SELECT 1 FROM events LIMIT 1")
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.warning("Database check failed: %s", e)
            return False
        return True

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def fetch_events(self) -> list[dict]:
        return await asyncio.to_thread(self._fetch_events)

    async def fetch_filter_options(self) -> dict:
        return await asyncio.to_thread(self._fetch_filter_options)

    async def current_user_capabilities(self, user_id: str) -> dict:
        return await asyncio.to_thread(self._current_user_capabilities, user_id)

    def _fetch_events(self) -> list[dict]:
        conn = self._open()
        try:
            return self._event_records(conn) + self._meeting_records(conn)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read events: {e}") from e
        finally:
            conn.close()

    def _event_records(self, conn: sqlite3.Connection) -> list[dict]:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT e.*,
                   c.name AS category_name, c.color AS category_color, c.icon_svg AS category_icon,
                   o.name AS organization_name, o.alias AS organization_alias,
                   p.first_name AS contact_first_name, p.last_name AS contact_last_name
            FROM events e
            LEFT JOIN event_categories c ON c.id = e.category_id
            LEFT JOIN organizations o ON o.id = e.organization_id
            LEFT JOIN contacts p ON p.id = e.contact_person_id
            ORDER BY e.event_date
            """
        )
        rows = cursor.fetchall()

        assignments = _group_by(conn.execute("SELECT * FROM employee_assignments"), "event_id")
        equipment = _group_by(conn.execute("SELECT * FROM event_equipment"), "event_id")
        vehicles = _group_by(conn.execute("SELECT * FROM event_vehicles"), "event_id")
        tasks = _group_by(conn.execute("SELECT * FROM event_tasks"), "event_id")

        records = []
        for row in rows:
            event_id = row["id"]
            contact = None
            if row["contact_person_id"] is not None:
                full_name = f"{row['contact_first_name'] or ''} {row['contact_last_name'] or ''}".strip()
                contact = {"id": row["contact_person_id"], "full_name": full_name}
            records.append(
                {
                    "id": event_id,
                    "is_meeting": False,
                    "name": row["name"],
                    "event_date": row["event_date"],
                    "event_end_date": row["event_end_date"],
                    "status": row["status"],
                    "location": row["location"],
                    "description": row["description"],
                    "budget": row["budget"],
                    "final_cost": row["final_cost"],
                    "created_by": row["created_by"],
                    "attachments": _json_list(row["attachments"], "attachments", event_id),
                    "category": {
                        "id": row["category_id"],
                        "name": row["category_name"],
                        "color": row["category_color"],
                        "icon_svg": row["category_icon"],
                    }
                    if row["category_id"] is not None
                    else None,
                    "organization": {
                        "id": row["organization_id"],
                        "name": row["organization_name"],
                        "alias": row["organization_alias"],
                    }
                    if row["organization_id"] is not None
                    else None,
                    "contact": contact,
                    "employees": assignments.get(event_id, []),
                    "equipment": equipment.get(event_id, []),
                    "vehicles": vehicles.get(event_id, []),
                    "tasks": tasks.get(event_id, []),
                }
            )
        return records

    def _meeting_records(self, conn: sqlite3.Connection) -> list[dict]:
        rows = conn.execute("SELECT * FROM meetings ORDER BY datetime_start").fetchall()
        participants = _group_by(conn.execute("SELECT * FROM meeting_participants"), "meeting_id")

        records = []
        for row in rows:
            records.append(
                {
                    "id": f"m{row['id']}",
                    "is_meeting": True,
                    "title": row["title"],
                    "datetime_start": row["datetime_start"],
                    "datetime_end": row["datetime_end"],
                    "is_all_day": bool(row["is_all_day"]),
                    "color": row["color"],
                    "notes": row["notes"],
                    "location_text": row["location_text"],
                    "related_event_ids": _json_list(row["related_event_ids"], "related_event_ids", row["id"]),
                    "created_by": row["created_by"],
                    "participants": [
                        {
                            "employee_id": p["employee_id"],
                            "contact_id": str(p["contact_id"]) if p["contact_id"] is not None else None,
                        }
                        for p in participants.get(row["id"], [])
                    ],
                }
            )
        return records

    def _fetch_filter_options(self) -> dict:
        conn = self._open()
        try:
            categories = [
                {"id": str(row["id"]), "name": row["name"], "color": row["color"]}
                for row in conn.execute("SELECT * FROM event_categories ORDER BY name")
            ]
            clients = [
                {"id": str(row["id"]), "name": row["name"], "alias": row["alias"], "type": "organization"}
                for row in conn.execute("SELECT * FROM organizations ORDER BY name")
            ]
            clients += [
                {
                    "id": str(row["id"]),
                    "name": f"{row['first_name']} {row['last_name'] or ''}".strip(),
                    "alias": None,
                    "type": "individual",
                }
                for row in conn.execute("SELECT * FROM contacts ORDER BY last_name, first_name")
            ]
            employees = [
                {
                    "id": row["id"],
                    "name": row["name"],
                    "surname": row["surname"] or "",
                    "nickname": row["nickname"],
                }
                for row in conn.execute("SELECT * FROM employees ORDER BY surname, name")
            ]
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read filter options: {e}") from e
        finally:
            conn.close()

        return {"categories": categories, "clients": clients, "employees": employees}

    def _current_user_capabilities(self, user_id: str) -> dict:
        conn = self._open()
        try:
            row = conn.execute("SELECT permissions FROM employees WHERE id = ?", (user_id,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read permissions for {user_id}: {e}") from e
        finally:
            conn.close()

        if row is None:
            logger.warning("Unknown employee %s; no permissions granted", user_id)
            return {"id": user_id, "can_create_events": False, "permissions": []}

        permissions = [p.strip() for p in (row["permissions"] or "").split(",") if p.strip()]
        return {
            "id": user_id,
            "can_create_events": bool(set(permissions) & EVENT_CREATE_PERMISSIONS),
            "permissions": permissions,
        }

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_event(self, payload: EventCreate) -> dict:
        event_id = await asyncio.to_thread(self._insert_event, payload)
        logger.info("Created event %s (%s)", event_id, payload.name)
        self.feed.publish({"table": "events", "type": "INSERT", "id": str(event_id)})
        return {"id": str(event_id), "name": payload.name}

    async def create_meeting(self, payload: MeetingCreate) -> dict:
        meeting_id = await asyncio.to_thread(self._insert_meeting, payload)
        logger.info("Created meeting %s (%s)", meeting_id, payload.title)
        self.feed.publish({"table": "meetings", "type": "INSERT", "id": f"m{meeting_id}"})
        return {"id": f"m{meeting_id}", "title": payload.title}

    def _insert_event(self, payload: EventCreate) -> int:
        conn = self._open(StoreWriteError)
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO events (
                    name, organization_id, contact_person_id, category_id,
                    event_date, event_end_date, location, description,
                    status, budget, attachments, created_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    payload.name,
                    payload.organization_id,
                    payload.contact_person_id,
                    payload.category_id,
                    _iso(payload.event_date),
                    _iso(payload.event_end_date),
                    payload.location,
                    payload.description,
                    payload.status,
                    payload.budget,
                    json.dumps(payload.attachments) if payload.attachments else None,
                    payload.created_by,
                ),
            )
            conn.commit()
            return cursor.lastrowid
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreWriteError(f"Failed to create event: {e}") from e
        finally:
            conn.close()

    def _insert_meeting(self, payload: MeetingCreate) -> int:
        conn = self._open(StoreWriteError)
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO meetings (
                    title, datetime_start, datetime_end, is_all_day, color,
                    notes, location_text, related_event_ids, created_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    payload.title,
                    _iso(payload.datetime_start),
                    _iso(payload.datetime_end),
                    int(payload.is_all_day),
                    payload.color,
                    payload.notes,
                    payload.location_text,
                    json.dumps(payload.related_event_ids) if payload.related_event_ids else None,
                    payload.created_by,
                ),
            )
            meeting_id = cursor.lastrowid
            for participant in payload.participants:
                cursor.execute(
                    "INSERT INTO meeting_participants (meeting_id, employee_id, contact_id) VALUES (?, ?, ?)",
                    (meeting_id, participant.employee_id, participant.contact_id),
                )
            conn.commit()
            return meeting_id
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreWriteError(f"Failed to create meeting: {e}") from e
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Change notifications
    # -------------------------------------------------------------------------

    def subscribe_to_event_changes(self, callback: ChangeCallback) -> Callable[[], None]:
        return self.feed.subscribe(callback)

    async def watch_external_changes(self, interval: float = 1.0) -> None:
        """
        Publish a change whenever another connection commits.

        PRAGMA data_version only moves for commits made through other
        connections, so this loop never reacts to its own reads. Runs until
        cancelled.
        """
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        try:
            last_version = await asyncio.to_thread(self._data_version, conn)
            while True:
                await asyncio.sleep(interval)
                version = await asyncio.to_thread(self._data_version, conn)
                if version != last_version:
                    last_version = version
                    logger.debug("External database change detected (data_version=%s)", version)
                    self.feed.publish({"table": "*", "type": "EXTERNAL", "id": None})
        finally:
            conn.close()

    @staticmethod
    def _data_version(conn: sqlite3.Connection) -> int:
        return conn.execute("PRAGMA data_version").fetchone()[0]
