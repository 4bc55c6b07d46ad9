#!/usr/bin/env python3
"""
Print a calendar view from the SQLite database as plain text.

Loads events through the same controller the API uses, applies filters
and prints the month, week, day or employee layout.

Usage:
    uv run python src/scripts/print_calendar.py --view week --date 2025-03-12
    uv run python src/scripts/print_calendar.py --status offer_sent --status completed
"""

import argparse
import asyncio
import sys
import traceback
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import SQLiteEventStore
from models.filters import FilterSet
from models.view_state import ViewMode
from services.employee_view import EmployeeBoard
from services.month_view import MonthGrid
from services.orchestrator import CalendarController
from services.summary import status_label, time_range
from services.time_grid import DayGrid, WeekGrid

# =============================================================================
# TEXT RENDERING
# =============================================================================


def month_text(grid: MonthGrid) -> list[str]:
    lines = [grid.label, "  ".join(f"{h:>4}" for h in grid.weekday_headers)]
    for week in grid.weeks:
        row = []
        for cell in week:
            if cell is None:
                row.append("    ")
                continue
            marker = "*" if cell.is_today else " "
            row.append(f"{cell.date.day:>2}{marker}{cell.total_count or ''}".ljust(4))
        lines.append("  ".join(row))

    lines.append("")
    for cell in grid.cells:
        if cell is None or cell.is_empty:
            continue
        lines.append(f"{cell.date.isoformat()}:")
        for chip in cell.chips:
            lines.append(f"  - {time_range(chip.event)} {chip.event.name}")
        if cell.overflow_count:
            lines.append(f"  ... +{cell.overflow_count} więcej")
    return lines


def week_text(grid: WeekGrid) -> list[str]:
    lines = [grid.label]
    for column in grid.columns:
        marker = " (dziś)" if column.is_today else ""
        lines.append(f"{column.header}{marker}")
        for block in column.blocks:
            lines.append(f"  {block.time_label:<13} {block.event.name}")
    return lines


def day_text(grid: DayGrid) -> list[str]:
    lines = [grid.label]
    for event in grid.agenda:
        label = status_label(event)
        suffix = f" [{label}]" if label else ""
        lines.append(f"  {time_range(event):<13} {event.name} - {event.client_name}{suffix}")
    stats = grid.statistics
    lines.append(
        f"Budżet: {stats.total_budget:.2f} | Sprzęt: {stats.equipment_count} | Pracownicy: {stats.employee_count}"
    )
    return lines


def employee_text(board: EmployeeBoard) -> list[str]:
    if board.is_empty:
        return [board.label, "Brak pracowników"]
    lines = [board.label]
    for section in board.sections:
        lines.append(f"{section.title} ({section.count_label})")
        for entry in section.entries:
            role = f" [{entry.role}]" if entry.role else ""
            lines.append(f"  {entry.date_label} {entry.event.name}{role}")
    return lines


def render_text(layout) -> str:
    """Plain-text rendering of any view layout."""
    if isinstance(layout, WeekGrid):
        lines = week_text(layout)
    elif isinstance(layout, DayGrid):
        lines = day_text(layout)
    elif isinstance(layout, EmployeeBoard):
        lines = employee_text(layout)
    else:
        lines = month_text(layout)
    return "\n".join(lines)


# =============================================================================
# MAIN
# =============================================================================


async def main(args: argparse.Namespace):
    """Main entry point."""
    try:
        reference_date = datetime.strptime(args.date, "%Y-%m-%d").date() if args.date else None
        store = SQLiteEventStore(args.db)
        controller = CalendarController(
            store,
            current_user_id=args.user,
            view=args.view,
            reference_date=reference_date,
            locale=args.locale,
        )

        async with controller.mounted():
            if controller.load_error:
                print(f"Error: {controller.load_error}")
                return 1

            controller.set_filters(
                FilterSet.from_values(
                    statuses=args.status,
                    categories=args.category,
                    clients=args.client,
                    employees=args.employee,
                    my_events=args.mine,
                    assigned_to_me=args.assigned,
                )
            )
            print(render_text(controller.render()))
            print(f"\n{controller.count_label}")
        return 0

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print a calendar view")
    parser.add_argument(
        "--view",
        choices=[v.value for v in ViewMode],
        default=ViewMode.MONTH.value,
        help="Calendar view (default: month)",
    )
    parser.add_argument("--date", help="Reference date (YYYY-MM-DD). Defaults to today.")
    parser.add_argument("--status", action="append", default=[], help="Status filter (repeatable)")
    parser.add_argument("--category", action="append", default=[], help="Category id or name (repeatable)")
    parser.add_argument("--client", action="append", default=[], help="Organization id or name (repeatable)")
    parser.add_argument("--employee", action="append", default=[], help="Employee id (repeatable)")
    parser.add_argument("--user", help="Session employee id for --mine / --assigned")
    parser.add_argument("--mine", action="store_true", help="Only events created by --user")
    parser.add_argument("--assigned", action="store_true", help="Only events --user is assigned to")
    parser.add_argument("--locale", choices=["pl", "en"], help="Label language")
    parser.add_argument("--db", type=Path, default=DB_PATH, help=f"Database path (default: {DB_PATH})")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    sys.exit(asyncio.run(main(args)))
