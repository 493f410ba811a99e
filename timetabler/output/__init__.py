"""Result schema and output formatting."""

from .schema import (
    OutputStatus,
    ScheduleStatistics,
    EntitySchedule,
    ScheduleViews,
    ScheduleResult,
    create_views,
)
from .formatters import (
    JSONFormatter,
    CSVFormatter,
    ConsoleFormatter,
    StaffViewFormatter,
    format_json,
    format_csv,
    format_console,
    format_staff_view,
    build_week_grid,
    build_conflict_table,
    build_fitness_table,
    save_json,
    save_csv,
)

__all__ = [
    # Schema
    "OutputStatus",
    "ScheduleStatistics",
    "EntitySchedule",
    "ScheduleViews",
    "ScheduleResult",
    "create_views",
    # Formatters
    "JSONFormatter",
    "CSVFormatter",
    "ConsoleFormatter",
    "StaffViewFormatter",
    "format_json",
    "format_csv",
    "format_console",
    "format_staff_view",
    "build_week_grid",
    "build_conflict_table",
    "build_fitness_table",
    # File utilities
    "save_json",
    "save_csv",
]
