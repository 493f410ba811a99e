"""Tests for random schedule construction."""

from __future__ import annotations

import random

import pytest

from timetabler.data.models import (
    Classroom,
    ConflictType,
    RoomType,
    ScheduleRequest,
    Severity,
    Staff,
    Subject,
    SubjectType,
    TimeSlot,
)
from timetabler.engine.context import SchedulingContext
from timetabler.engine.initializer import (
    create_individual,
    create_population,
    find_unschedulable_sessions,
)


@pytest.fixture
def slots() -> list[TimeSlot]:
    return [
        TimeSlot(day="Monday", time="09:00-10:00"),
        TimeSlot(day="Monday", time="10:00-11:00"),
        TimeSlot(day="Tuesday", time="09:00-10:00"),
        TimeSlot(day="Tuesday", time="10:00-11:00"),
    ]


@pytest.fixture
def classrooms() -> list[Classroom]:
    return [
        Classroom(id="r1", name="Room 1", capacity=60),
        Classroom(id="r2", name="Lab 1", type=RoomType.LAB, capacity=40),
    ]


@pytest.fixture
def request_data(slots, classrooms) -> ScheduleRequest:
    return ScheduleRequest(
        department="CSE",
        subjects=[
            Subject(code="CS101", name="Programming", hours_per_week=2),
            Subject(code="CS102", name="Programming Lab", type=SubjectType.LAB, duration=2, hours_per_week=2),
        ],
        staff=[
            Staff(id="s1", name="Dr. Rao", subjects=["CS101"]),
            Staff(id="s2", name="Dr. Nair", subjects=["CS101", "CS102"]),
        ],
        available_slots=slots,
        classrooms=classrooms,
    )


@pytest.fixture
def context(request_data) -> SchedulingContext:
    return SchedulingContext.from_request(request_data)


def context_for(subject: Subject, staff: list[Staff], slots, classrooms) -> SchedulingContext:
    return SchedulingContext.from_request(ScheduleRequest(
        department="CSE",
        subjects=[subject],
        staff=staff,
        available_slots=slots,
        classrooms=classrooms,
    ))


class TestSchedulingContext:
    """Tests for the read-only request index."""

    def test_qualified_staff_index(self, context):
        assert [s.id for s in context.qualified_for("CS101")] == ["s1", "s2"]
        assert [s.id for s in context.qualified_for("CS102")] == ["s2"]
        assert context.qualified_for("CS999") == ()

    def test_days_in_week_order(self, classrooms):
        context = SchedulingContext.from_request(ScheduleRequest(
            department="CSE",
            available_slots=[TimeSlot(day="Friday", time="9"), TimeSlot(day="Monday", time="9")],
            classrooms=classrooms,
        ))
        assert context.days == ("Monday", "Friday")


class TestCreateIndividual:
    """Tests for create_individual."""

    def test_one_entry_per_session(self, context):
        individual = create_individual(context, random.Random(1))
        assert [e.id for e in individual] == ["CS101-1", "CS101-2", "CS102-1"]
        assert [e.session for e in individual] == [0, 1, 0]

    def test_entries_use_qualified_staff_and_known_resources(self, context, slots, classrooms):
        slot_keys = {s.key for s in slots}
        room_ids = {c.id for c in classrooms}

        for seed in range(20):
            for entry in create_individual(context, random.Random(seed)):
                assert entry.staff_id in {s.id for s in context.qualified_for(entry.subject_code)}
                assert entry.slot_key in slot_keys
                assert entry.classroom_id in room_ids
                assert entry.department == "CSE"

    def test_duration_copied_from_subject(self, context):
        individual = create_individual(context, random.Random(1))
        assert [e.duration for e in individual] == [1, 1, 2]

    def test_three_sessions_with_qualified_staff(self, slots, classrooms):
        """6 hours in 2-period sessions is exactly three entries."""
        subject = Subject(code="CS201", name="Networks Lab", type=SubjectType.LAB, duration=2, hours_per_week=6)
        staff = [Staff(id="s1", name="Dr. Rao", subjects=["CS201"])]
        individual = create_individual(context_for(subject, staff, slots, classrooms), random.Random(3))
        assert len(individual) == 3

    def test_no_entries_without_qualified_staff(self, slots, classrooms):
        subject = Subject(code="CS201", name="Networks Lab", type=SubjectType.LAB, duration=2, hours_per_week=6)
        staff = [Staff(id="s1", name="Dr. Rao", subjects=["CS101"])]
        individual = create_individual(context_for(subject, staff, slots, classrooms), random.Random(3))
        assert individual == []

    def test_no_entries_without_slots(self, classrooms):
        subject = Subject(code="CS101", name="Programming", hours_per_week=2)
        staff = [Staff(id="s1", name="Dr. Rao", subjects=["CS101"])]
        assert create_individual(context_for(subject, staff, [], classrooms), random.Random(0)) == []

    def test_seeded_rng_is_reproducible(self, context):
        first = create_individual(context, random.Random(42))
        second = create_individual(context, random.Random(42))
        assert first == second


class TestCreatePopulation:
    """Tests for create_population."""

    def test_population_size(self, context):
        population = create_population(context, random.Random(0), 12)
        assert len(population) == 12
        assert all(len(individual) == 3 for individual in population)


class TestUnschedulableSessions:
    """Tests for find_unschedulable_sessions."""

    def test_none_when_everything_is_placeable(self, context):
        assert find_unschedulable_sessions(context) == []

    def test_one_conflict_per_missing_session(self, slots, classrooms):
        subject = Subject(code="CS201", name="Networks Lab", type=SubjectType.LAB, duration=2, hours_per_week=6)
        staff = [Staff(id="s1", name="Dr. Rao", subjects=["CS101"])]
        conflicts = find_unschedulable_sessions(context_for(subject, staff, slots, classrooms))

        assert len(conflicts) == 3
        assert all(c.type == ConflictType.UNSCHEDULABLE_SESSION for c in conflicts)
        assert all(c.severity == Severity.HIGH for c in conflicts)
        assert conflicts[0].description == (
            "Session 1/3 of Networks Lab (CS201) not scheduled: no qualified staff"
        )

    def test_reason_without_classrooms(self, slots):
        subject = Subject(code="CS101", name="Programming", hours_per_week=1)
        staff = [Staff(id="s1", name="Dr. Rao", subjects=["CS101"])]
        conflicts = find_unschedulable_sessions(context_for(subject, staff, slots, []))

        assert len(conflicts) == 1
        assert conflicts[0].description.endswith("no classrooms")

    def test_reason_without_slots(self, classrooms):
        subject = Subject(code="CS101", name="Programming", hours_per_week=1)
        staff = [Staff(id="s1", name="Dr. Rao", subjects=["CS101"])]
        conflicts = find_unschedulable_sessions(context_for(subject, staff, [], classrooms))

        assert conflicts[0].description.endswith("no available time slots")
