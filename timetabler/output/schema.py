"""
Output schema for generated timetables.

This module defines the JSON-serializable result of a scheduling run,
including pre-computed views of the schedule by staff, classroom and day.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from timetabler.data.models import Conflict, Severity, TimetableEntry, day_index


# =============================================================================
# Enums
# =============================================================================

class OutputStatus(str, Enum):
    """How the search that produced the schedule ended."""
    COMPLETED = "completed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class OutputModel(BaseModel):
    """Base for output records: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Statistics
# =============================================================================

class ScheduleStatistics(OutputModel):
    """Summary figures for a schedule."""
    utilization_rate: float = Field(default=0.0, ge=0.0)
    workload_distribution: dict[str, int] = Field(default_factory=dict)
    time_distribution: dict[str, int] = Field(default_factory=dict)
    classroom_usage: dict[str, int] = Field(default_factory=dict)
    total_entries: int = 0
    total_duration: int = 0
    efficiency_score: float = 0.0


# =============================================================================
# Views
# =============================================================================

class EntitySchedule(OutputModel):
    """Schedule for one staff member or classroom."""
    id: str
    name: str
    entries: list[TimetableEntry]
    by_day: dict[str, list[TimetableEntry]] = Field(default_factory=dict)


class ScheduleViews(OutputModel):
    """Pre-computed views of the schedule for convenience."""
    by_staff: dict[str, EntitySchedule] = Field(default_factory=dict)
    by_classroom: dict[str, EntitySchedule] = Field(default_factory=dict)
    by_day: dict[str, list[TimetableEntry]] = Field(default_factory=dict)


def sort_entries(entries: list[TimetableEntry]) -> list[TimetableEntry]:
    """Order entries by week day, then start time."""
    return sorted(entries, key=lambda e: (day_index(e.day), e.time))


def group_by_day(entries: list[TimetableEntry]) -> dict[str, list[TimetableEntry]]:
    by_day: dict[str, list[TimetableEntry]] = {}
    for entry in sort_entries(entries):
        by_day.setdefault(entry.day, []).append(entry)
    return by_day


def create_views(schedule: list[TimetableEntry]) -> ScheduleViews:
    """Group a schedule by staff, classroom and day."""
    by_staff: dict[str, list[TimetableEntry]] = {}
    by_classroom: dict[str, list[TimetableEntry]] = {}

    for entry in schedule:
        by_staff.setdefault(entry.staff_id, []).append(entry)
        by_classroom.setdefault(entry.classroom_id, []).append(entry)

    staff_schedules = {
        staff_id: EntitySchedule(
            id=staff_id,
            name=entries[0].staff_name,
            entries=sort_entries(entries),
            by_day=group_by_day(entries),
        )
        for staff_id, entries in by_staff.items()
    }
    classroom_schedules = {
        room_id: EntitySchedule(
            id=room_id,
            name=entries[0].classroom_name,
            entries=sort_entries(entries),
            by_day=group_by_day(entries),
        )
        for room_id, entries in by_classroom.items()
    }

    return ScheduleViews(
        by_staff=staff_schedules,
        by_classroom=classroom_schedules,
        by_day=group_by_day(schedule),
    )


# =============================================================================
# Complete Output
# =============================================================================

class ScheduleResult(OutputModel):
    """Complete output of a scheduling run."""
    schedule: list[TimetableEntry] = Field(default_factory=list)
    conflicts: list[Conflict] = Field(default_factory=list)
    statistics: ScheduleStatistics = Field(default_factory=ScheduleStatistics)
    fitness: float = 0.0
    # Unweighted component scores, penalty and total
    fitness_breakdown: dict[str, float] = Field(default_factory=dict)
    status: OutputStatus = OutputStatus.COMPLETED
    generations_run: int = 0
    fitness_history: list[float] = Field(default_factory=list)
    solve_time_seconds: float = 0.0

    @computed_field(alias="hasHardConflicts")
    @property
    def has_hard_conflicts(self) -> bool:
        return any(c.severity == Severity.HIGH for c in self.conflicts)

    def conflicts_of_severity(self, severity: Severity) -> list[Conflict]:
        return [c for c in self.conflicts if c.severity == severity]

    def views(self) -> ScheduleViews:
        return create_views(self.schedule)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(by_alias=True, indent=indent)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(by_alias=True, mode="json")
