"""
Read-only view of one scheduling request.

The context is built once per run and shared by every individual's
initialisation, mutation and fitness evaluation. Nothing in it is mutated
after construction, so evaluations can run in parallel.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from timetabler.data.models import (
    Classroom,
    ScheduleRequest,
    SchedulingPreferences,
    Staff,
    Subject,
    TimeSlot,
    day_index,
)


@dataclass(frozen=True)
class SchedulingContext:
    """Immutable reference data for a single search."""
    department: str
    subjects: tuple[Subject, ...]
    staff: tuple[Staff, ...]
    slots: tuple[TimeSlot, ...]
    classrooms: tuple[Classroom, ...]
    qualified_staff: Mapping[str, tuple[Staff, ...]]
    subjects_by_code: Mapping[str, Subject]
    preferences: Optional[SchedulingPreferences] = None

    @classmethod
    def from_request(cls, request: ScheduleRequest) -> SchedulingContext:
        """Index a request: qualified staff per subject code, subjects by code."""
        qualified = {
            subject.code: tuple(s for s in request.staff if s.can_teach(subject))
            for subject in request.subjects
        }
        return cls(
            department=request.department,
            subjects=tuple(request.subjects),
            staff=tuple(request.staff),
            slots=tuple(request.available_slots),
            classrooms=tuple(request.classrooms),
            qualified_staff=qualified,
            subjects_by_code={s.code: s for s in request.subjects},
            preferences=request.preferences,
        )

    @property
    def days(self) -> tuple[str, ...]:
        """Distinct days of the available slots, in week order."""
        return tuple(sorted({s.day for s in self.slots}, key=day_index))

    @property
    def slot_keys(self) -> tuple[str, ...]:
        return tuple(s.key for s in self.slots)

    def qualified_for(self, subject_code: str) -> tuple[Staff, ...]:
        return self.qualified_staff.get(subject_code, ())

    def is_schedulable(self, subject: Subject) -> bool:
        """A subject can be placed when it has staff, a slot and a room."""
        return bool(self.qualified_for(subject.code) and self.slots and self.classrooms)
