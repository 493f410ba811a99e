"""
Output formatters for generated timetables.

This module provides formatters for different output formats:
- JSON: Complete result with schedule, conflicts and statistics
- CSV: Flat format for spreadsheets
- Console: Week grid and conflict tables for the CLI
- Staff views: Individual timetables
"""

from __future__ import annotations

import csv
import json
from collections.abc import Sequence
from io import StringIO
from pathlib import Path
from typing import TextIO, Union

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from timetabler.data.models import Conflict, Severity, TimetableEntry, day_index

from .schema import OutputStatus, ScheduleResult, sort_entries

SEVERITY_STYLES = {
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter:
    """Formats a schedule result as JSON."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def format(self, result: ScheduleResult) -> str:
        return json.dumps(result.to_dict(), indent=self.indent, ensure_ascii=self.ensure_ascii)

    def format_compact(self, result: ScheduleResult) -> str:
        """Format as compact single-line JSON."""
        return json.dumps(result.to_dict(), ensure_ascii=self.ensure_ascii, separators=(",", ":"))

    def format_schedule_only(self, result: ScheduleResult) -> str:
        """Format only the entries array as JSON."""
        entries = [entry.model_dump(by_alias=True, mode="json") for entry in result.schedule]
        return json.dumps(entries, indent=self.indent, ensure_ascii=self.ensure_ascii)


def format_json(result: ScheduleResult, indent: int = 2) -> str:
    """Convenience function for JSON formatting."""
    return JSONFormatter(indent=indent).format(result)


# =============================================================================
# CSV Formatter
# =============================================================================

class CSVFormatter:
    """Formats a schedule as CSV, one row per entry."""

    DEFAULT_COLUMNS = [
        "id", "subject_code", "subject_name", "day", "time", "duration",
        "staff_id", "staff_name", "classroom_id", "classroom_name", "session",
    ]

    MINIMAL_COLUMNS = ["subject_code", "day", "time", "staff_name", "classroom_name"]

    def __init__(
        self,
        columns: list[str] | None = None,
        include_header: bool = True,
        delimiter: str = ",",
    ):
        """
        Initialize CSV formatter.

        Args:
            columns: Entry fields to include (None = all default columns)
            include_header: Whether to include header row
            delimiter: Field delimiter
        """
        self.columns = columns or self.DEFAULT_COLUMNS
        self.include_header = include_header
        self.delimiter = delimiter

    def format(self, result: ScheduleResult) -> str:
        buffer = StringIO()
        self.write(result, buffer)
        return buffer.getvalue()

    def write(self, result: ScheduleResult, file: TextIO) -> None:
        """Write CSV rows, ordered by day then time, to a file-like object."""
        writer = csv.writer(file, delimiter=self.delimiter)

        if self.include_header:
            writer.writerow(self.columns)

        for entry in sort_entries(result.schedule):
            writer.writerow(self._entry_to_row(entry))

    def _entry_to_row(self, entry: TimetableEntry) -> list[str]:
        values = entry.model_dump()
        return ["" if values.get(col) is None else str(values.get(col)) for col in self.columns]


def format_csv(result: ScheduleResult, minimal: bool = False) -> str:
    """Convenience function for CSV formatting."""
    columns = CSVFormatter.MINIMAL_COLUMNS if minimal else None
    return CSVFormatter(columns=columns).format(result)


# =============================================================================
# Console Formatter
# =============================================================================

class ConsoleFormatter:
    """Formats a schedule result for the terminal with rich."""

    def __init__(self, width: int | None = None):
        self.width = width

    def format(self, result: ScheduleResult) -> str:
        """Render to plain text (via a recording console)."""
        console = Console(record=True, width=self.width or 120)
        self.print(result, console)
        return console.export_text()

    def print(self, result: ScheduleResult, console: Console | None = None) -> None:
        console = console or Console(width=self.width)

        status_color = "green" if result.status == OutputStatus.COMPLETED else "yellow"
        console.print(Panel(
            Text(result.status.value.upper(), style=f"bold {status_color}"),
            title="Generated Timetable",
            subtitle=f"{result.generations_run} generations in {result.solve_time_seconds:.2f}s",
        ))

        stats = result.statistics
        console.print("\n[bold]Summary:[/bold]")
        console.print(f"  Entries: {stats.total_entries}")
        console.print(f"  Fitness: {result.fitness:.2f}")
        console.print(f"  Utilization: {stats.utilization_rate:.1%}")
        console.print(f"  Efficiency: {stats.efficiency_score:.1f}/100")

        if result.fitness_breakdown:
            console.print(build_fitness_table(result.fitness_breakdown))

        console.print(build_week_grid(result.schedule))

        if result.conflicts:
            console.print(build_conflict_table(result.conflicts))


def build_week_grid(schedule: Sequence[TimetableEntry]) -> Table:
    """Time rows by day columns; clashing entries share a cell."""
    table = Table(title="Weekly Schedule", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")

    days = sorted({entry.day for entry in schedule}, key=day_index)
    for day in days:
        table.add_column(day[:3], justify="center")

    cells: dict[tuple[str, str], list[TimetableEntry]] = {}
    for entry in schedule:
        cells.setdefault((entry.day, entry.time), []).append(entry)

    for time in sorted({entry.time for entry in schedule}):
        row = [time]
        for day in days:
            entries = cells.get((day, time))
            if entries:
                row.append("\n".join(f"{e.subject_code}\n{e.staff_name} @ {e.classroom_name}" for e in entries))
            else:
                row.append("-")
        table.add_row(*row)

    return table


def build_conflict_table(conflicts: Sequence[Conflict], title: str = "Conflicts") -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Severity")
    table.add_column("Type")
    table.add_column("Description")

    for conflict in conflicts:
        table.add_row(
            Text(conflict.severity.value, style=SEVERITY_STYLES[conflict.severity]),
            conflict.type.value,
            conflict.description,
        )

    return table


def build_fitness_table(breakdown: dict[str, float]) -> Table:
    """Unweighted fitness components, one row each."""
    table = Table(title="Fitness Components", show_header=True, header_style="bold")
    table.add_column("Component")
    table.add_column("Score", justify="right")

    for name, value in breakdown.items():
        table.add_row(name, f"{value:.2f}")

    return table


def format_console(result: ScheduleResult) -> str:
    """Convenience function for console formatting."""
    return ConsoleFormatter().format(result)


# =============================================================================
# Staff View Formatter
# =============================================================================

class StaffViewFormatter:
    """Formats individual staff timetables."""

    def format(self, result: ScheduleResult, staff_id: str) -> str:
        schedule = result.views().by_staff.get(staff_id)
        if not schedule:
            return f"No schedule found for staff: {staff_id}"

        console = Console(record=True, width=100)
        console.print(Panel(f"[bold]{schedule.name}[/bold] ({schedule.id})", title="Staff Schedule"))

        table = Table(show_header=True, header_style="bold")
        table.add_column("Day", style="cyan")
        table.add_column("Time")
        table.add_column("Subject")
        table.add_column("Classroom")

        for day, entries in schedule.by_day.items():
            for entry in entries:
                table.add_row(day, entry.time, entry.subject_name, entry.classroom_name)

        console.print(table)
        return console.export_text()


def format_staff_view(result: ScheduleResult, staff_id: str) -> str:
    """Format timetable for a specific staff member."""
    return StaffViewFormatter().format(result, staff_id)


# =============================================================================
# File Utilities
# =============================================================================

def save_json(result: ScheduleResult, path: Union[str, Path], indent: int = 2) -> None:
    Path(path).write_text(format_json(result, indent=indent), encoding="utf-8")


def save_csv(result: ScheduleResult, path: Union[str, Path]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        CSVFormatter().write(result, f)
