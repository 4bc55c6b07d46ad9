"""
Filter engine: reduce the event snapshot to the visible subset.
"""

from typing import Iterable

from models.events import CalendarItem
from models.filters import FilterSet


def matches_status(event: CalendarItem, statuses: frozenset[str]) -> bool:
    # Meetings carry no status and never match a status filter
    return event.status is not None and event.status in statuses


def matches_category(event: CalendarItem, categories: frozenset[str]) -> bool:
    category = event.category
    if category is None:
        return False
    return category.id in categories or category.name in categories


def matches_client(event: CalendarItem, clients: frozenset[str]) -> bool:
    organization = event.organization
    if organization is None:
        return False
    return organization.id in clients or organization.name in clients


def involves_any(event: CalendarItem, employee_ids: Iterable[str]) -> bool:
    """
    Participant check for meetings, assignment check for business events.

    Both variants expose involved_employee_ids; the variant decides which
    relation it reads.
    """
    return not event.involved_employee_ids.isdisjoint(employee_ids)


def apply_filters(
    events: Iterable[CalendarItem],
    filters: FilterSet,
    current_user_id: str | None = None,
) -> tuple[CalendarItem, ...]:
    """
    Intersect every non-empty filter dimension (AND, never OR).

    Self-referencing flags (my_events, assigned_to_me) are ignored while
    no current user is known.
    """
    predicates = []

    if filters.statuses:
        predicates.append(lambda e: matches_status(e, filters.statuses))
    if filters.categories:
        predicates.append(lambda e: matches_category(e, filters.categories))
    if filters.clients:
        predicates.append(lambda e: matches_client(e, filters.clients))
    if filters.my_events and current_user_id:
        predicates.append(lambda e: e.created_by == current_user_id)
    if filters.assigned_to_me and current_user_id:
        predicates.append(lambda e: involves_any(e, (current_user_id,)))
    if filters.employees:
        predicates.append(lambda e: involves_any(e, filters.employees))

    return tuple(e for e in events if all(predicate(e) for predicate in predicates))
