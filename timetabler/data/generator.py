"""
Sample data generator for demos and tests.

This module generates a realistic department dataset (subjects, staff,
classrooms, student groups and weekly time slots) with configurable size.
The default configuration passes feasibility validation for the built-in
CSE, ECE and MECH requirements.

Usage:
    from timetabler.data.generator import generate_sample_dataset, GeneratorConfig

    dataset = generate_sample_dataset(GeneratorConfig(department="ECE", seed=7))
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from .models import (
    DAY_NAMES,
    ROLE_MAX_HOURS,
    Classroom,
    DepartmentDataset,
    RoomType,
    SchedulingPreferences,
    Staff,
    StudentGroup,
    Subject,
    SubjectType,
    TimeSlot,
)


# =============================================================================
# Name Data
# =============================================================================

FIRST_NAMES = [
    "Anita", "Arjun", "Deepa", "Ganesh", "Kavitha", "Karthik", "Lakshmi", "Meena",
    "Mohan", "Nisha", "Priya", "Rahul", "Ramesh", "Sanjay", "Shalini", "Suresh",
    "Divya", "Vikram", "Vijay", "Yamini", "Harish", "Revathi", "Senthil", "Uma",
]

LAST_NAMES = [
    "Kumar", "Raman", "Iyer", "Nair", "Menon", "Pillai", "Reddy", "Rao",
    "Krishnan", "Subramanian", "Natarajan", "Sundaram", "Balaji", "Prakash",
]


# =============================================================================
# Subject Catalogue
# =============================================================================

# (code, name, type)
DEPARTMENT_SUBJECTS: dict[str, list[tuple[str, str, SubjectType]]] = {
    "CSE": [
        ("CS8391", "Data Structures", SubjectType.THEORY),
        ("CS8392", "Object Oriented Programming Lab", SubjectType.LAB),
        ("CS8393", "Digital Principles", SubjectType.THEORY),
        ("CS8394", "Data Structures Lab", SubjectType.LAB),
    ],
    "ECE": [
        ("EC8391", "Control Systems", SubjectType.THEORY),
        ("EC8392", "Electronic Devices Lab", SubjectType.LAB),
        ("EC8393", "Signals and Systems", SubjectType.THEORY),
        ("EC8394", "Analog Circuits Lab", SubjectType.LAB),
    ],
    "MECH": [
        ("ME8391", "Engineering Thermodynamics", SubjectType.THEORY),
        ("ME8392", "Manufacturing Technology Lab", SubjectType.LAB),
        ("ME8393", "Engineering Materials", SubjectType.THEORY),
    ],
}

PERIOD_TIMES = [
    "09:00-10:00", "10:00-11:00", "11:15-12:15",
    "12:15-13:15", "14:00-15:00", "15:00-16:00",
]


# =============================================================================
# Generator Configuration
# =============================================================================

@dataclass
class GeneratorConfig:
    """Configuration for data generation.

    The defaults produce a dataset that schedules cleanly:
    - One lab room per lab subject
    - At least as many staff as classrooms (tutor coverage)
    - Group strength below every lecture room's capacity
    """
    department: str = "CSE"
    year: str = "2"
    semester: str = "3"

    # Entity counts
    num_staff: int = 6
    num_lecture_rooms: int = 2
    num_lab_rooms: int = 2
    num_groups: int = 1

    # Subject settings
    theory_hours_per_week: int = 4
    lab_hours_per_week: int = 4
    lab_duration: int = 2

    # Staff settings
    staff_min_subjects: int = 1
    staff_max_subjects: int = 2
    max_current_hours: int = 4

    # Room and group settings
    lecture_capacity: int = 60
    lab_capacity: int = 40
    min_strength: int = 30
    max_strength: int = 40

    # Slot settings
    num_days: int = 5
    periods_per_day: int = 6

    with_preferences: bool = False

    # Randomization
    seed: Optional[int] = None


# =============================================================================
# Generator Functions
# =============================================================================

def generate_sample_dataset(config: GeneratorConfig | None = None) -> DepartmentDataset:
    """
    Generate a sample department dataset.

    Args:
        config: Generator configuration (uses defaults if None)

    Returns:
        DepartmentDataset with generated data
    """
    if config is None:
        config = GeneratorConfig()

    rng = random.Random(config.seed)

    subjects = _generate_subjects(config)
    staff = _generate_staff(config, subjects, rng)
    classrooms = _generate_classrooms(config)
    groups = _generate_groups(config, rng)
    slots = _generate_slots(config)

    preferences = None
    if config.with_preferences:
        preferences = SchedulingPreferences(
            prefer_morning=True,
            avoid_friday_afternoon=True,
            avoid_lunch_slot=True,
        )

    return DepartmentDataset(
        department=config.department,
        year=config.year,
        semester=config.semester,
        subjects=subjects,
        staff=staff,
        classrooms=classrooms,
        student_groups=groups,
        available_slots=slots,
        preferences=preferences,
    )


def _generate_subjects(config: GeneratorConfig) -> list[Subject]:
    catalogue = DEPARTMENT_SUBJECTS.get(config.department)
    if catalogue is None:
        prefix = config.department[:2].upper()
        catalogue = [
            (f"{prefix}101", "Foundations", SubjectType.THEORY),
            (f"{prefix}102", "Workshop", SubjectType.LAB),
        ]

    subjects = []
    for code, name, subject_type in catalogue:
        is_lab = subject_type == SubjectType.LAB
        subjects.append(Subject(
            id=code.lower(),
            code=code,
            name=name,
            type=subject_type,
            credits=2 if is_lab else 3,
            duration=config.lab_duration if is_lab else 1,
            hours_per_week=config.lab_hours_per_week if is_lab else config.theory_hours_per_week,
            department=config.department,
            year=config.year,
            semester=config.semester,
        ))
    return subjects


def _generate_staff(config: GeneratorConfig, subjects: list[Subject], rng: random.Random) -> list[Staff]:
    """Generate staff; subjects are dealt round-robin so each has a teacher."""
    staff = []
    used_names: set[str] = set()
    codes = [s.code for s in subjects]
    roles = list(ROLE_MAX_HOURS)

    for i in range(config.num_staff):
        while True:
            name = f"Dr. {rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
            if name not in used_names or len(used_names) >= len(FIRST_NAMES) * len(LAST_NAMES):
                used_names.add(name)
                break

        qualified = {codes[i % len(codes)]} if codes else set()
        extra = rng.randint(config.staff_min_subjects, config.staff_max_subjects) - 1
        if extra > 0 and codes:
            qualified.update(rng.sample(codes, min(extra, len(codes))))

        role = rng.choice(roles)
        staff.append(Staff(
            id=f"{config.department.lower()}-s{i + 1}",
            name=name,
            email=f"staff{i + 1}@{config.department.lower()}.example.edu",
            department=config.department,
            role=role,
            max_hours=ROLE_MAX_HOURS[role],
            current_hours=rng.randint(0, config.max_current_hours),
            subjects=sorted(qualified),
        ))

    return staff


def _generate_classrooms(config: GeneratorConfig) -> list[Classroom]:
    prefix = config.department.upper()
    rooms = [
        Classroom(
            id=f"{prefix.lower()}-lh{i + 1}",
            name=f"{prefix} Lecture Hall {i + 1}",
            type=RoomType.LECTURE,
            capacity=config.lecture_capacity,
            department=config.department,
        )
        for i in range(config.num_lecture_rooms)
    ]
    rooms.extend(
        Classroom(
            id=f"{prefix.lower()}-lab{i + 1}",
            name=f"{prefix} Lab {i + 1}",
            type=RoomType.LAB,
            capacity=config.lab_capacity,
            department=config.department,
        )
        for i in range(config.num_lab_rooms)
    )
    return rooms


def _generate_groups(config: GeneratorConfig, rng: random.Random) -> list[StudentGroup]:
    return [
        StudentGroup(
            id=f"{config.department.lower()}-{config.year}-{chr(ord('a') + i)}",
            name=f"{config.department} {config.year} {chr(ord('A') + i)}",
            department=config.department,
            year=config.year,
            semester=config.semester,
            strength=rng.randint(config.min_strength, config.max_strength),
        )
        for i in range(config.num_groups)
    ]


def _generate_slots(config: GeneratorConfig) -> list[TimeSlot]:
    return [
        TimeSlot(day=day, time=time)
        for day in DAY_NAMES[:config.num_days]
        for time in PERIOD_TIMES[:config.periods_per_day]
    ]


# =============================================================================
# File Utilities
# =============================================================================

def save_generated_dataset(dataset: DepartmentDataset, filepath: Union[str, Path]) -> None:
    """Write a dataset as camelCase JSON, loadable with ``load_dataset``."""
    Path(filepath).write_text(
        dataset.model_dump_json(by_alias=True, indent=2, exclude_none=True),
        encoding="utf-8",
    )


def get_generation_stats(dataset: DepartmentDataset) -> dict[str, Any]:
    """
    Get statistics about a generated dataset.

    Returns:
        Dictionary with entity counts, total sessions and slot utilization
    """
    request = dataset.to_request()
    total_periods = sum(s.hours_per_week for s in request.subjects)
    capacity = len(request.available_slots) * len(request.classrooms)

    return {
        "department": dataset.department,
        "subjects": len(dataset.subjects),
        "staff": len(dataset.staff),
        "classrooms": len(dataset.classrooms),
        "student_groups": len(dataset.student_groups),
        "available_slots": len(dataset.available_slots),
        "total_sessions": request.total_sessions,
        "total_periods": total_periods,
        "utilization_percent": round(total_periods / capacity * 100, 1) if capacity else 0.0,
    }
