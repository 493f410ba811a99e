"""
Random construction of candidate schedules.

A candidate (individual) is a flat list of TimetableEntry. Each subject
needs ``ceil(hours_per_week / duration)`` sessions; every session gets a
random qualified staff member, a random available slot and a random
classroom. Subjects nobody is qualified to teach produce no entries and are
reported separately by ``find_unschedulable_sessions``.
"""

from __future__ import annotations

import random

from timetabler.data.models import (
    Classroom,
    Conflict,
    ConflictType,
    Severity,
    Staff,
    Subject,
    TimeSlot,
    TimetableEntry,
)

from .context import SchedulingContext


def build_entry(
    subject: Subject,
    session: int,
    staff: Staff,
    slot: TimeSlot,
    classroom: Classroom,
    department: str | None = None,
) -> TimetableEntry:
    """Create the entry for one session of a subject."""
    return TimetableEntry(
        id=f"{subject.code}-{session + 1}",
        subject_code=subject.code,
        subject_name=subject.name,
        staff_id=staff.id,
        staff_name=staff.name,
        day=slot.day,
        time=slot.time,
        duration=subject.duration,
        classroom_id=classroom.id,
        classroom_name=classroom.name,
        session=session,
        department=department,
    )


def create_individual(context: SchedulingContext, rng: random.Random) -> list[TimetableEntry]:
    """
    Build one random candidate schedule.

    Args:
        context: Reference data for the run
        rng: Random source owned by the caller

    Returns:
        List of entries, one per schedulable session
    """
    individual: list[TimetableEntry] = []
    if not context.slots or not context.classrooms:
        return individual

    for subject in context.subjects:
        qualified = context.qualified_for(subject.code)
        if not qualified:
            continue

        for session in range(subject.sessions_per_week):
            individual.append(build_entry(
                subject,
                session,
                rng.choice(qualified),
                rng.choice(context.slots),
                rng.choice(context.classrooms),
                context.department,
            ))

    return individual


def create_population(
    context: SchedulingContext,
    rng: random.Random,
    size: int,
) -> list[list[TimetableEntry]]:
    """Build ``size`` independent random candidates."""
    return [create_individual(context, rng) for _ in range(size)]


def find_unschedulable_sessions(context: SchedulingContext) -> list[Conflict]:
    """
    Report every session that cannot be placed.

    One high-severity conflict per missing session, so the caller can see
    exactly how many requested hours went unscheduled.
    """
    conflicts = []
    for subject in context.subjects:
        if context.is_schedulable(subject):
            continue

        if not context.qualified_for(subject.code):
            reason = "no qualified staff"
        elif not context.slots:
            reason = "no available time slots"
        else:
            reason = "no classrooms"

        for session in range(subject.sessions_per_week):
            conflicts.append(Conflict(
                type=ConflictType.UNSCHEDULABLE_SESSION,
                description=(
                    f"Session {session + 1}/{subject.sessions_per_week} of "
                    f"{subject.name} ({subject.code}) not scheduled: {reason}"
                ),
                severity=Severity.HIGH,
            ))

    return conflicts
