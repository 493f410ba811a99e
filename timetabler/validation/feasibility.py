"""
Pre-scheduling feasibility validation.

Runs before any search and checks whether a department has the staff,
rooms and curriculum coverage needed to build a timetable. Every problem is
returned as a Conflict; nothing here raises for bad data.

Checks, in order:
1. Staff sufficiency and overload
2. Classroom sufficiency (lecture rooms, lab rooms, lab subjects vs labs)
3. Subject coverage and lab durations
4. Staff-subject qualification and remaining capacity
5. Classroom capacity vs student group strength
6. Tutor coverage (rooms vs staff)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from timetabler.data.models import (
    Classroom,
    Conflict,
    ConflictType,
    DepartmentRequirements,
    RoomType,
    Severity,
    Staff,
    StudentGroup,
    Subject,
    SubjectType,
    ValidationResult,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Default Requirements
# =============================================================================

DEFAULT_DEPARTMENT_REQUIREMENTS: dict[str, DepartmentRequirements] = {
    "CSE": DepartmentRequirements(
        min_staff=4,
        required_subjects=["CS8391", "CS8392", "CS8393", "CS8394"],
        lab_subjects=["CS8392", "CS8394"],
        theory_subjects=["CS8391", "CS8393"],
        min_lecture_rooms=2,
        min_lab_rooms=1,
    ),
    "ECE": DepartmentRequirements(
        min_staff=4,
        required_subjects=["EC8391", "EC8392", "EC8393", "EC8394"],
        lab_subjects=["EC8392", "EC8394"],
        theory_subjects=["EC8391", "EC8393"],
        min_lecture_rooms=2,
        min_lab_rooms=1,
    ),
    "MECH": DepartmentRequirements(
        min_staff=3,
        required_subjects=["ME8391", "ME8392", "ME8393"],
        lab_subjects=["ME8392"],
        theory_subjects=["ME8391", "ME8393"],
        min_lecture_rooms=2,
        min_lab_rooms=1,
    ),
}


@dataclass
class CheckResult:
    """Conflicts and recommendations produced by a single check."""
    conflicts: list[Conflict] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def add(
        self,
        conflict_type: ConflictType,
        description: str,
        severity: Severity,
        recommendation: Optional[str] = None,
    ) -> None:
        self.conflicts.append(Conflict(type=conflict_type, description=description, severity=severity))
        if recommendation:
            self.recommendations.append(recommendation)


# =============================================================================
# Validator
# =============================================================================

class FeasibilityValidator:
    """
    Rule-based validator run before scheduling.

    Usage:
        validator = FeasibilityValidator()
        result = validator.validate(subjects, staff, classrooms, groups, "CSE", "2", "odd")
        if not result.is_valid:
            ...
    """

    def __init__(self, requirements: Optional[Mapping[str, DepartmentRequirements]] = None):
        """
        Initialize the validator.

        Args:
            requirements: Department code -> requirements (defaults to the
                built-in CSE/ECE/MECH table)
        """
        if requirements is None:
            requirements = DEFAULT_DEPARTMENT_REQUIREMENTS
        self.requirements = dict(requirements)

    def validate(
        self,
        subjects: Sequence[Subject],
        staff: Sequence[Staff],
        classrooms: Sequence[Classroom],
        student_groups: Sequence[StudentGroup],
        department: str,
        year: Optional[str],
        semester: Optional[str],
    ) -> ValidationResult:
        """
        Run every feasibility check and combine the results.

        Returns:
            ValidationResult; ``is_valid`` is False when any conflict is high
            severity
        """
        checks = [
            self.check_staff_requirements(staff, department),
            self.check_classroom_requirements(classrooms, subjects, department),
            self.check_subject_requirements(subjects, department, year, semester),
            self.check_staff_subject_allocation(staff, subjects),
            self.check_classroom_capacity(classrooms, student_groups),
            self.check_tutor_assignments(staff, classrooms, department),
        ]

        conflicts: list[Conflict] = []
        recommendations: list[str] = []
        for check in checks:
            conflicts.extend(check.conflicts)
            recommendations.extend(check.recommendations)

        result = ValidationResult(conflicts=conflicts, recommendations=recommendations)
        logger.info(
            "Validated %s year=%s semester=%s: %d conflicts (%d high), valid=%s",
            department, year, semester, len(conflicts),
            len(result.by_severity(Severity.HIGH)), result.is_valid,
        )
        return result

    # -------------------------------------------------------------------------
    # Individual checks
    # -------------------------------------------------------------------------

    def check_staff_requirements(self, staff: Sequence[Staff], department: str) -> CheckResult:
        """Department staff count against the minimum, plus overload detection."""
        result = CheckResult()
        department_staff = active_department_staff(staff, department)
        requirements = self.requirements.get(department)

        if requirements is None:
            result.add(
                ConflictType.UNKNOWN_DEPARTMENT,
                f"No validation rules defined for department: {department}",
                Severity.MEDIUM,
            )
            return result

        if len(department_staff) < requirements.min_staff:
            shortfall = requirements.min_staff - len(department_staff)
            result.add(
                ConflictType.INSUFFICIENT_STAFF,
                f"{department} requires minimum {requirements.min_staff} staff members, "
                f"but only {len(department_staff)} available",
                Severity.HIGH,
                f"Add {shortfall} more staff members to {department}",
            )

        for member in department_staff:
            if member.is_overloaded:
                result.add(
                    ConflictType.OVERLOADED_STAFF,
                    f"{member.name} is already at maximum capacity "
                    f"({member.current_hours}/{member.max_hours} hours)",
                    Severity.HIGH,
                    f"Reduce workload for {member.name} or increase their maximum hours",
                )

        return result

    def check_classroom_requirements(
        self,
        classrooms: Sequence[Classroom],
        subjects: Sequence[Subject],
        department: str,
    ) -> CheckResult:
        """Lecture/lab room counts against minimums and lab subjects against labs."""
        result = CheckResult()
        requirements = self.requirements.get(department)
        if requirements is None:
            return result

        rooms = active_department_classrooms(classrooms, department)
        lecture_rooms = [r for r in rooms if r.type == RoomType.LECTURE]
        lab_rooms = [r for r in rooms if r.type == RoomType.LAB]

        if len(lecture_rooms) < requirements.min_lecture_rooms:
            result.add(
                ConflictType.INSUFFICIENT_LECTURE_ROOMS,
                f"{department} requires {requirements.min_lecture_rooms} lecture rooms, "
                f"but only {len(lecture_rooms)} available",
                Severity.HIGH,
                f"Add {requirements.min_lecture_rooms - len(lecture_rooms)} more lecture rooms for {department}",
            )

        if len(lab_rooms) < requirements.min_lab_rooms:
            result.add(
                ConflictType.INSUFFICIENT_LAB_ROOMS,
                f"{department} requires {requirements.min_lab_rooms} lab rooms, "
                f"but only {len(lab_rooms)} available",
                Severity.HIGH,
                f"Add {requirements.min_lab_rooms - len(lab_rooms)} more lab rooms for {department}",
            )

        lab_subjects = [s for s in subjects if s.type == SubjectType.LAB]
        if len(lab_subjects) > len(lab_rooms):
            result.add(
                ConflictType.LAB_ROOM_SHORTAGE,
                f"{len(lab_subjects)} lab subjects require more lab rooms than available ({len(lab_rooms)})",
                Severity.MEDIUM,
                "Consider scheduling labs in multiple batches or add more lab rooms",
            )

        return result

    def check_subject_requirements(
        self,
        subjects: Sequence[Subject],
        department: str,
        year: Optional[str],
        semester: Optional[str],
    ) -> CheckResult:
        """Required subject coverage and minimum lab durations."""
        result = CheckResult()
        requirements = self.requirements.get(department)
        if requirements is None:
            return result

        department_subjects = [
            s for s in subjects
            if s.department == department and s.year == year and s.semester == semester
        ]
        present_codes = {s.code for s in department_subjects}
        missing = [code for code in requirements.required_for_year(year) if code not in present_codes]

        if missing:
            result.add(
                ConflictType.MISSING_SUBJECTS,
                f"Missing required subjects for {department} {year} year: {', '.join(missing)}",
                Severity.HIGH,
                f"Add missing subjects: {', '.join(missing)}",
            )

        for subject in department_subjects:
            if subject.type == SubjectType.LAB and subject.duration < 2:
                result.add(
                    ConflictType.INSUFFICIENT_LAB_DURATION,
                    f"Lab subject {subject.name} should have minimum 2 periods duration",
                    Severity.MEDIUM,
                    f"Set minimum 2 periods for lab subject: {subject.name}",
                )

        return result

    def check_staff_subject_allocation(
        self,
        staff: Sequence[Staff],
        subjects: Sequence[Subject],
    ) -> CheckResult:
        """Every subject needs a qualified teacher and a teacher with spare hours."""
        result = CheckResult()

        for subject in subjects:
            qualified = [
                s for s in staff
                if s.is_active
                and s.department == subject.department
                and (not s.subjects or subject.code in s.subjects)
            ]
            if not qualified:
                result.add(
                    ConflictType.NO_QUALIFIED_STAFF,
                    f"No qualified staff available for subject: {subject.name} ({subject.code})",
                    Severity.HIGH,
                    f"Assign qualified staff to teach {subject.name} or update staff subject expertise",
                )

        for subject in subjects:
            hours_required = required_hours(subject)
            with_capacity = [
                s for s in staff
                if s.is_active
                and s.department == subject.department
                and s.current_hours + hours_required <= s.max_hours
            ]
            if not with_capacity:
                result.add(
                    ConflictType.STAFF_CAPACITY_EXCEEDED,
                    f"No staff with sufficient capacity for subject: {subject.name}",
                    Severity.HIGH,
                    f"Redistribute workload or add more staff for {subject.department}",
                )

        return result

    def check_classroom_capacity(
        self,
        classrooms: Sequence[Classroom],
        student_groups: Sequence[StudentGroup],
    ) -> CheckResult:
        """Each student group needs a large enough active room in its department."""
        result = CheckResult()

        for group in student_groups:
            suitable = [
                c for c in classrooms
                if c.is_active and c.department == group.department and c.capacity >= group.strength
            ]
            if not suitable:
                result.add(
                    ConflictType.INSUFFICIENT_CLASSROOM_CAPACITY,
                    f"No classroom with sufficient capacity for student group: "
                    f"{group.name} ({group.strength} students)",
                    Severity.HIGH,
                    f"Increase classroom capacity or split student group: {group.name}",
                )

        return result

    def check_tutor_assignments(
        self,
        staff: Sequence[Staff],
        classrooms: Sequence[Classroom],
        department: str,
    ) -> CheckResult:
        """Every active classroom should be coverable by a tutor."""
        result = CheckResult()
        rooms = active_department_classrooms(classrooms, department)
        tutors = active_department_staff(staff, department)

        if len(rooms) > len(tutors):
            result.add(
                ConflictType.INSUFFICIENT_TUTORS,
                f"{department} has {len(rooms)} classrooms but only {len(tutors)} "
                f"available staff for tutor assignments",
                Severity.MEDIUM,
                f"Assign tutors to all classrooms in {department} or add more staff",
            )

        return result


# =============================================================================
# Helpers
# =============================================================================

def active_department_staff(staff: Sequence[Staff], department: str) -> list[Staff]:
    return [s for s in staff if s.department == department and s.is_active]


def active_department_classrooms(classrooms: Sequence[Classroom], department: str) -> list[Classroom]:
    return [c for c in classrooms if c.department == department and c.is_active]


def required_hours(subject: Subject) -> int:
    """Hours a single allocation of the subject adds to a teacher's load."""
    if subject.type == SubjectType.LAB:
        return subject.duration
    return 1


def validate_pre_scheduling_requirements(
    subjects: Sequence[Subject],
    staff: Sequence[Staff],
    classrooms: Sequence[Classroom],
    student_groups: Sequence[StudentGroup],
    department: str,
    year: Optional[str],
    semester: Optional[str],
    requirements: Optional[Mapping[str, DepartmentRequirements]] = None,
) -> ValidationResult:
    """Convenience function running all feasibility checks."""
    validator = FeasibilityValidator(requirements)
    return validator.validate(subjects, staff, classrooms, student_groups, department, year, semester)
