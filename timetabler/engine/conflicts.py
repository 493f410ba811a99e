"""Clash detection on a finished schedule."""

from __future__ import annotations

from collections.abc import Sequence

from timetabler.data.models import Conflict, ConflictType, Severity, TimetableEntry


def detect_conflicts(schedule: Sequence[TimetableEntry]) -> list[Conflict]:
    """
    Find every staff and classroom double-booking.

    Each unordered pair of entries in the same day and time yields a staff
    conflict if they share a staff member and a classroom conflict if they
    share a room, so the result lines up one-to-one with the penalty terms
    used during the search.

    Args:
        schedule: Entries to check

    Returns:
        High-severity conflicts, each carrying both entries
    """
    conflicts = []
    for i, first in enumerate(schedule):
        for second in schedule[i + 1:]:
            if first.day != second.day or first.time != second.time:
                continue

            if first.staff_id == second.staff_id:
                conflicts.append(Conflict(
                    type=ConflictType.STAFF,
                    description=(
                        f"{first.staff_name} has multiple classes at {first.day} {first.time}: "
                        f"{first.subject_code} and {second.subject_code}"
                    ),
                    severity=Severity.HIGH,
                    entries=[first, second],
                ))

            if first.classroom_id == second.classroom_id:
                conflicts.append(Conflict(
                    type=ConflictType.CLASSROOM,
                    description=(
                        f"{first.classroom_name} is double-booked at {first.day} {first.time}: "
                        f"{first.subject_code} and {second.subject_code}"
                    ),
                    severity=Severity.HIGH,
                    entries=[first, second],
                ))

    return conflicts
