"""
Summary statistics of a schedule.

- utilization_rate: booked periods / (slots x classrooms)
- workload_distribution: staff name -> booked periods
- time_distribution: day -> entry count
- classroom_usage: classroom name -> entry count
- efficiency_score: 0-100, penalising conflicts and uneven days
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from timetabler.data.models import Classroom, Conflict, TimeSlot, TimetableEntry
from timetabler.output.schema import ScheduleStatistics

from .fitness import variance

CONFLICT_EFFICIENCY_COST = 10
DISTRIBUTION_BONUS = 20


def efficiency_score(schedule: Sequence[TimetableEntry], conflict_count: int) -> float:
    """
    Score a schedule out of 100.

    ``100 - 10 per conflict`` (floored at 0), plus up to 20 points for an even
    spread of entries over the scheduled days, capped at 100.
    """
    base = max(0, 100 - CONFLICT_EFFICIENCY_COST * conflict_count)
    per_day = Counter(entry.day for entry in schedule)
    bonus = max(0.0, DISTRIBUTION_BONUS - variance(per_day.values()))
    return min(100.0, base + bonus)


def calculate_statistics(
    schedule: Sequence[TimetableEntry],
    available_slots: Sequence[TimeSlot],
    classrooms: Sequence[Classroom],
    conflicts: Sequence[Conflict] = (),
) -> ScheduleStatistics:
    """
    Compute the statistics of a schedule.

    Args:
        schedule: Scheduled entries
        available_slots: Slots the schedule could use
        classrooms: Classrooms the schedule could use
        conflicts: Conflicts reported for the schedule

    Returns:
        ScheduleStatistics
    """
    total_duration = sum(entry.duration for entry in schedule)
    capacity = len(available_slots) * len(classrooms)

    workload: Counter[str] = Counter()
    per_day: Counter[str] = Counter()
    per_room: Counter[str] = Counter()
    for entry in schedule:
        workload[entry.staff_name] += entry.duration
        per_day[entry.day] += 1
        per_room[entry.classroom_name] += 1

    return ScheduleStatistics(
        utilization_rate=total_duration / capacity if capacity else 0.0,
        workload_distribution=dict(workload),
        time_distribution=dict(per_day),
        classroom_usage=dict(per_room),
        total_entries=len(schedule),
        total_duration=total_duration,
        efficiency_score=efficiency_score(schedule, len(conflicts)),
    )
