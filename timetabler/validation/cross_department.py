"""
Advisory checks of a proposed timetable against resources shared with
other departments.

Staff and classrooms are institution-wide: a lecturer in CSE may also teach
in ECE. These checks never block generation; all conflicts are medium
severity.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Optional

from timetabler.data.models import (
    MAX_PERIODS_PER_DAY,
    Classroom,
    Conflict,
    ConflictType,
    Severity,
    Staff,
    TimetableEntry,
    ValidationResult,
)

logger = logging.getLogger(__name__)

REVIEW_RECOMMENDATION = "Review cross-department resource allocation before finalizing timetable"


def build_usage_map(entries: Sequence[TimetableEntry], attribute: str) -> dict[str, set[str]]:
    """Map a resource ID (``staff_id`` or ``classroom_id``) to its used slot keys."""
    usage: dict[str, set[str]] = defaultdict(set)
    for entry in entries:
        usage[getattr(entry, attribute)].add(entry.slot_key)
    return usage


def check_staff_overload(
    staff: Sequence[Staff],
    usage: dict[str, set[str]],
) -> list[Conflict]:
    """Staff whose distinct booked slots exceed their weekly ceiling."""
    conflicts = []
    for member in staff:
        slots = usage.get(member.id)
        if slots and len(slots) > member.max_hours:
            conflicts.append(Conflict(
                type=ConflictType.CROSS_DEPARTMENT_STAFF_OVERLOAD,
                description=(
                    f"Staff member {member.name} may have scheduling conflicts across departments "
                    f"({len(slots)} slots booked, maximum {member.max_hours})"
                ),
                severity=Severity.MEDIUM,
            ))
    return conflicts


def check_classroom_overuse(
    classrooms: Sequence[Classroom],
    usage: dict[str, set[str]],
    max_slots: int = MAX_PERIODS_PER_DAY,
) -> list[Conflict]:
    """Classrooms booked in more slots than the daily period count."""
    conflicts = []
    for room in classrooms:
        slots = usage.get(room.id)
        if slots and len(slots) > max_slots:
            conflicts.append(Conflict(
                type=ConflictType.CROSS_DEPARTMENT_CLASSROOM_OVERUSE,
                description=(
                    f"Classroom {room.name} may be overbooked across departments "
                    f"({len(slots)} slots booked)"
                ),
                severity=Severity.MEDIUM,
            ))
    return conflicts


def check_direct_clashes(
    proposed: Sequence[TimetableEntry],
    existing: Sequence[TimetableEntry],
) -> list[Conflict]:
    """Proposed sessions that collide with sessions already booked elsewhere."""
    by_slot: dict[str, list[TimetableEntry]] = defaultdict(list)
    for entry in existing:
        by_slot[entry.slot_key].append(entry)

    conflicts = []
    for entry in proposed:
        for other in by_slot.get(entry.slot_key, ()):
            if other.staff_id == entry.staff_id:
                conflicts.append(Conflict(
                    type=ConflictType.CROSS_DEPARTMENT_STAFF_CLASH,
                    description=(
                        f"{entry.staff_name} is already teaching {other.subject_code} "
                        f"on {entry.day} {entry.time}"
                    ),
                    severity=Severity.MEDIUM,
                    entries=[entry, other],
                ))
            if other.classroom_id == entry.classroom_id:
                conflicts.append(Conflict(
                    type=ConflictType.CROSS_DEPARTMENT_CLASSROOM_CLASH,
                    description=(
                        f"{entry.classroom_name} is already booked for {other.subject_code} "
                        f"on {entry.day} {entry.time}"
                    ),
                    severity=Severity.MEDIUM,
                    entries=[entry, other],
                ))
    return conflicts


def validate_cross_department_conflicts(
    all_staff: Sequence[Staff],
    all_classrooms: Sequence[Classroom],
    target_department: str,
    proposed_timetable: Sequence[TimetableEntry],
    existing_timetable: Optional[Sequence[TimetableEntry]] = None,
) -> ValidationResult:
    """
    Check a proposed timetable against institution-wide staff and room usage.

    Args:
        all_staff: Staff from every department
        all_classrooms: Classrooms from every department
        target_department: Department the proposed timetable belongs to
        proposed_timetable: Entries about to be committed
        existing_timetable: Entries already committed by other departments

    Returns:
        ValidationResult with medium-severity conflicts only
    """
    existing = [
        e for e in (existing_timetable or [])
        if e.department is None or e.department != target_department
    ]
    combined = list(proposed_timetable) + existing

    conflicts: list[Conflict] = []
    conflicts.extend(check_staff_overload(all_staff, build_usage_map(combined, "staff_id")))
    conflicts.extend(check_classroom_overuse(all_classrooms, build_usage_map(combined, "classroom_id")))
    conflicts.extend(check_direct_clashes(proposed_timetable, existing))

    recommendations = [REVIEW_RECOMMENDATION] if conflicts else []

    logger.info(
        "Cross-department check for %s: %d proposed entries, %d existing, %d conflicts",
        target_department, len(proposed_timetable), len(existing), len(conflicts),
    )
    return ValidationResult(conflicts=conflicts, recommendations=recommendations)
