"""Tests for the month grid layout and the overflow stack."""

from datetime import date, datetime

from core.config import ACCENT_COLOR, MEETING_COLOR
from models.events import BusinessEvent, Category
from services.month_view import chip_color, render_month, stack_layers

TODAY = date(2025, 3, 10)


def test_grid_shape(events):
    grid = render_month(date(2025, 3, 20), events, today=TODAY, locale="pl")

    assert grid.label == "marzec 2025"
    assert grid.weekday_headers[0] == "Pon"
    assert grid.cells[:5] == (None,) * 5
    assert grid.cells[5].date == date(2025, 3, 1)
    assert all(len(week) <= 7 for week in grid.weeks)


def test_three_events_overflow_by_one(events):
    grid = render_month(TODAY, events, today=TODAY)
    cell = grid.cell_for(date(2025, 3, 10))

    assert cell.total_count == 3
    assert len(cell.chips) == 2
    assert cell.overflow_count == 1

    first, second = cell.chips
    assert not first.stacked
    assert second.stacked
    assert second.lift_px == 2
    assert len(second.stack_layers) == 1


def test_cell_flags_today(events):
    grid = render_month(TODAY, events, today=TODAY)

    assert grid.cell_for(date(2025, 3, 10)).is_today
    assert not grid.cell_for(date(2025, 3, 11)).is_today


def test_cell_without_events(events):
    cell = render_month(TODAY, events, today=TODAY).cell_for(date(2025, 3, 11))

    assert cell.is_empty
    assert cell.chips == ()
    assert cell.overflow_count == 0


def test_two_events_do_not_stack():
    events = [
        BusinessEvent(id="a", name="A", start=datetime(2025, 3, 5, 9)),
        BusinessEvent(id="b", name="B", start=datetime(2025, 3, 5, 11)),
    ]
    cell = render_month(TODAY, events, today=TODAY).cell_for(date(2025, 3, 5))

    assert cell.overflow_count == 0
    assert not any(chip.stacked for chip in cell.chips)


def test_stack_is_capped_at_two_layers():
    events = [
        BusinessEvent(id=str(i), name=f"E{i}", start=datetime(2025, 3, 5, 8 + i))
        for i in range(6)
    ]
    cell = render_month(TODAY, events, today=TODAY).cell_for(date(2025, 3, 5))

    assert cell.overflow_count == 4
    stacked = cell.chips[1]
    assert stacked.lift_px == 8
    assert len(stacked.stack_layers) == 2


def test_stack_layer_geometry():
    layers = stack_layers(5)

    assert [layer.offset_px for layer in layers] == [2, 4]
    assert [layer.opacity for layer in layers] == [0.5, 0.35]
    assert stack_layers(0) == ()


def test_chip_colors(events_by_id):
    assert chip_color(events_by_id["m1"]) == MEETING_COLOR
    assert chip_color(events_by_id["ev1"]) == "#3B82F6"
    assert chip_color(events_by_id["ev2"]) == ACCENT_COLOR
    assert chip_color(events_by_id["ev3"]) == ACCENT_COLOR


def test_chip_carries_category_icon():
    icon = "<svg></svg>"
    event = BusinessEvent(
        id="a",
        name="A",
        start=datetime(2025, 3, 5, 9),
        category=Category(id="c9", name="Custom", icon_svg=icon),
    )
    cell = render_month(TODAY, [event], today=TODAY).cell_for(date(2025, 3, 5))

    assert cell.chips[0].icon_svg == icon
