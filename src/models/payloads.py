"""
Pydantic write payloads for creating events and meetings.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from core.config import DEFAULT_EVENT_STATUS, EVENT_STATUSES


class ParticipantCreate(BaseModel):
    employee_id: str | None = None
    contact_id: str | None = None

    @model_validator(mode="after")
    def check_reference(self):
        if not self.employee_id and not self.contact_id:
            raise ValueError("Participant needs an employee or a contact")
        return self


class EventCreate(BaseModel):
    """Schema for creating a business or individual event."""

    name: str = Field(..., min_length=1, max_length=300)
    client_type: Literal["business", "individual"] = "business"
    organization_id: str | None = None
    contact_person_id: str | None = None
    category_id: str | None = None
    event_date: datetime
    event_end_date: datetime | None = None
    location: str | None = None
    budget: float | None = Field(None, ge=0)
    description: str | None = None
    status: str = DEFAULT_EVENT_STATUS
    attachments: list[str] = Field(default_factory=list)
    created_by: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Event name is required")
        return value

    @field_validator("status")
    @classmethod
    def check_status(cls, value: str) -> str:
        if value not in EVENT_STATUSES:
            raise ValueError(f"Unknown status '{value}'")
        return value

    @model_validator(mode="after")
    def check_client_and_range(self):
        if self.organization_id and self.contact_person_id:
            raise ValueError("Event cannot have both an organization and a contact as client")
        if self.event_end_date and self.event_end_date < self.event_date:
            raise ValueError("Event end must not be before its start")
        return self


class MeetingCreate(BaseModel):
    """Schema for creating a meeting."""

    title: str = Field(..., min_length=1, max_length=300)
    datetime_start: datetime
    datetime_end: datetime | None = None
    is_all_day: bool = False
    color: str | None = None
    notes: str | None = None
    location_text: str | None = None
    related_event_ids: list[str] = Field(default_factory=list)
    participants: list[ParticipantCreate] = Field(default_factory=list)
    created_by: str | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Meeting title is required")
        return value

    @model_validator(mode="after")
    def check_range(self):
        if self.datetime_end and self.datetime_end < self.datetime_start:
            raise ValueError("Meeting end must not be before its start")
        return self
