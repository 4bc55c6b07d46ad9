"""Conversion of calendar layouts into JSON-ready structures."""

from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum

from models.events import BusinessEvent, Contact, Meeting, Organization
from services.summary import status_label


def item_to_dict(event: BusinessEvent | Meeting) -> dict:
    """Calendar item with its kind tag and display fields."""
    data = {f.name: to_jsonable(getattr(event, f.name)) for f in fields(event)}
    data["kind"] = "meeting" if event.is_meeting else "event"
    data["category"] = to_jsonable(event.category)
    data["client_name"] = event.client_name
    data["status"] = event.status
    data["status_label"] = status_label(event)
    return data


def client_to_dict(client: Organization | Contact) -> dict:
    if isinstance(client, Organization):
        return {"id": client.id, "name": client.display_name, "type": "organization"}
    return {"id": client.id, "name": client.full_name, "type": "individual"}


def to_jsonable(value):
    """Recursively convert layout dataclasses; dates become ISO strings."""
    if isinstance(value, (BusinessEvent, Meeting)):
        return item_to_dict(value)
    if is_dataclass(value):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(item) for item in value)
    return value
