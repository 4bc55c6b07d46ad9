"""
Creation flows: event wizard and meeting form.

Both collect raw field values, validate them step by step and finally
produce a pydantic payload for the store.
"""

import logging
from datetime import date, datetime, time
from enum import Enum

from pydantic import ValidationError

from core.config import DEFAULT_EVENT_STATUS
from core.exceptions import StoreWriteError
from core.validation import error_messages, missing_fields
from models.payloads import EventCreate, MeetingCreate

logger = logging.getLogger(__name__)


class CreationType(str, Enum):
    BUSINESS = "business"
    INDIVIDUAL = "individual"
    MEETING = "meeting"


def creation_options(can_create_events: bool) -> list[CreationType]:
    """Types offered in the "new" selector; meeting-only without the capability."""
    if can_create_events:
        return [CreationType.BUSINESS, CreationType.INDIVIDUAL, CreationType.MEETING]
    return [CreationType.MEETING]


def _start_of(d: date | None) -> datetime | None:
    return datetime.combine(d, time()) if d else None


class EventWizard:
    """Multi-step event creation: client -> details -> schedule -> review."""

    STEPS = ("client", "details", "schedule", "review")

    def __init__(
        self,
        client_type: CreationType | str = CreationType.BUSINESS,
        initial_date: date | None = None,
        created_by: str | None = None,
    ):
        client_type = CreationType(client_type)
        if client_type == CreationType.MEETING:
            raise ValueError("Meetings are created with MeetingForm")
        self.client_type = client_type
        self.step_index = 0
        self.errors: list[str] = []
        self.error: str | None = None
        self.is_open = True
        self.data: dict = {
            "name": "",
            "client_type": client_type.value,
            "organization_id": None,
            "contact_person_id": None,
            "category_id": None,
            "event_date": _start_of(initial_date),
            "event_end_date": None,
            "location": None,
            "budget": None,
            "description": None,
            "status": DEFAULT_EVENT_STATUS,
            "attachments": [],
            "created_by": created_by,
        }

    @property
    def step(self) -> str:
        return self.STEPS[self.step_index]

    @property
    def is_last_step(self) -> bool:
        return self.step_index == len(self.STEPS) - 1

    def update(self, **fields) -> None:
        unknown = set(fields) - set(self.data)
        if unknown:
            raise ValueError(f"Unknown wizard fields: {', '.join(sorted(unknown))}")
        self.data.update(fields)

    def _client_errors(self) -> list[str]:
        if self.client_type == CreationType.BUSINESS:
            return missing_fields(self.data, ["organization_id"])
        return missing_fields(self.data, ["contact_person_id"])

    def validate_step(self) -> list[str]:
        """Errors for the fields owned by the current step."""
        if self.step == "client":
            return self._client_errors()

        if self.step == "details":
            return missing_fields(self.data, ["name"])

        if self.step == "schedule":
            errors = missing_fields(self.data, ["event_date"])
            start, end = self.data.get("event_date"), self.data.get("event_end_date")
            if not errors and end and end < start:
                errors.append("event_end_date: Event end must not be before its start")
            return errors

        return self.validate()

    def validate(self) -> list[str]:
        """Errors across every step; empty when the event can be created."""
        errors = self._client_errors()
        try:
            self._payload()
        except ValidationError as e:
            errors += error_messages(e)
        return errors

    def next_step(self) -> bool:
        """Advance if the current step is valid; errors are kept on failure."""
        self.errors = self.validate_step()
        if self.errors:
            return False
        if not self.is_last_step:
            self.step_index += 1
        return True

    def back(self) -> None:
        self.errors = []
        if self.step_index > 0:
            self.step_index -= 1

    def _payload(self) -> EventCreate:
        data = dict(self.data)
        # A business client is the organization; an individual client is the contact
        if self.client_type == CreationType.BUSINESS:
            data["contact_person_id"] = None
        else:
            data["organization_id"] = None
        return EventCreate.model_validate(data)

    def build_payload(self) -> EventCreate:
        """Validated payload; raises ValueError when the client is missing."""
        errors = self._client_errors()
        if errors:
            raise ValueError("; ".join(errors))
        return self._payload()

    async def submit(self, store) -> dict | None:
        """Create the event; the wizard stays open with `error` set on failure."""
        self.error = None
        self.errors = self.validate()
        if self.errors:
            return None

        try:
            created = await store.create_event(self.build_payload())
        except StoreWriteError as e:
            logger.error("Event creation failed: %s", e)
            self.error = str(e)
            return None

        self.is_open = False
        return created


class MeetingForm:
    """Single-page meeting creation form."""

    def __init__(self, initial_date: date | None = None, created_by: str | None = None):
        self.errors: list[str] = []
        self.error: str | None = None
        self.is_open = True
        self.data: dict = {
            "title": "",
            "datetime_start": _start_of(initial_date),
            "datetime_end": None,
            "is_all_day": False,
            "color": None,
            "notes": None,
            "location_text": None,
            "related_event_ids": [],
            "participants": [],
            "created_by": created_by,
        }

    def update(self, **fields) -> None:
        unknown = set(fields) - set(self.data)
        if unknown:
            raise ValueError(f"Unknown meeting fields: {', '.join(sorted(unknown))}")
        self.data.update(fields)

    def add_participant(self, employee_id: str | None = None, contact_id: str | None = None) -> None:
        self.data["participants"].append({"employee_id": employee_id, "contact_id": contact_id})

    def validate(self) -> list[str]:
        try:
            self.build_payload()
        except ValidationError as e:
            return error_messages(e)
        return []

    def build_payload(self) -> MeetingCreate:
        return MeetingCreate.model_validate(self.data)

    async def submit(self, store) -> dict | None:
        """Create the meeting; the form stays open with `error` set on failure."""
        self.error = None
        self.errors = self.validate()
        if self.errors:
            return None

        try:
            created = await store.create_meeting(self.build_payload())
        except StoreWriteError as e:
            logger.error("Meeting creation failed: %s", e)
            self.error = str(e)
            return None

        self.is_open = False
        return created
