"""
Filter set value object and its transitions.

A FilterSet is never edited in place; every action returns a new one.
"""

from dataclasses import dataclass, replace

SET_FILTERS = ("statuses", "categories", "clients", "employees")
FLAG_FILTERS = ("my_events", "assigned_to_me")


@dataclass(frozen=True)
class FilterSet:
    """Active combination of calendar filters."""

    statuses: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()
    clients: frozenset[str] = frozenset()
    employees: frozenset[str] = frozenset()
    my_events: bool = False
    assigned_to_me: bool = False

    @classmethod
    def from_values(
        cls,
        statuses=(),
        categories=(),
        clients=(),
        employees=(),
        my_events: bool = False,
        assigned_to_me: bool = False,
    ) -> "FilterSet":
        return cls(
            statuses=frozenset(statuses),
            categories=frozenset(categories),
            clients=frozenset(clients),
            employees=frozenset(employees),
            my_events=my_events,
            assigned_to_me=assigned_to_me,
        )


def toggle_filter(filters: FilterSet, kind: str, value: str | None = None) -> FilterSet:
    """
    Add/remove one value of a set filter, or flip a boolean filter.

    Raises:
        ValueError: unknown filter kind, or missing value for a set filter
    """
    if kind in FLAG_FILTERS:
        return replace(filters, **{kind: not getattr(filters, kind)})

    if kind not in SET_FILTERS:
        raise ValueError(f"Unknown filter kind: {kind}")
    if value is None:
        raise ValueError(f"Filter '{kind}' requires a value")

    current: frozenset[str] = getattr(filters, kind)
    updated = current - {value} if value in current else current | {value}
    return replace(filters, **{kind: updated})


def clear_filters(filters: FilterSet | None = None) -> FilterSet:
    """Reset every filter at once."""
    return FilterSet()


def has_active_filters(filters: FilterSet) -> bool:
    return active_filter_count(filters) > 0


def active_filter_count(filters: FilterSet) -> int:
    """Number shown on the filter badge."""
    count = sum(len(getattr(filters, kind)) for kind in SET_FILTERS)
    count += sum(1 for kind in FLAG_FILTERS if getattr(filters, kind))
    return count
