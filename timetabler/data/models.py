"""
Pydantic models for the academic timetable data model.

Records are plain data shapes supplied by the presentation/persistence
layer. Field names are snake_case in Python; camelCase aliases are accepted
on input and produced on output (``model_dump(by_alias=True)``).

Conventions:
- Days are names ("Monday" .. "Saturday")
- Times are period labels such as "09:00-10:00"
- Durations and workloads are counted in periods (one period = one hour)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# Constants and Enums
# =============================================================================

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Fixed number of teaching periods in a day
MAX_PERIODS_PER_DAY = 6

# Default weekly ceilings by staff role
ROLE_MAX_HOURS = {
    "Prof": 12,
    "AssocProf": 18,
    "AsstProf": 18,
}
DEFAULT_MAX_HOURS = 18


class SubjectType(str, Enum):
    """Kind of course offering."""
    THEORY = "theory"
    LAB = "lab"
    SEMINAR = "seminar"


class RoomType(str, Enum):
    """Kind of bookable room."""
    LECTURE = "lecture"
    LAB = "lab"


class Severity(str, Enum):
    """Conflict severity. Only HIGH blocks scheduling."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConflictType(str, Enum):
    """Every kind of problem the validators and detector can report."""
    # Pre-scheduling feasibility
    UNKNOWN_DEPARTMENT = "unknown_department"
    INSUFFICIENT_STAFF = "insufficient_staff"
    OVERLOADED_STAFF = "overloaded_staff"
    INSUFFICIENT_LECTURE_ROOMS = "insufficient_lecture_rooms"
    INSUFFICIENT_LAB_ROOMS = "insufficient_lab_rooms"
    LAB_ROOM_SHORTAGE = "lab_room_shortage"
    MISSING_SUBJECTS = "missing_subjects"
    INSUFFICIENT_LAB_DURATION = "insufficient_lab_duration"
    NO_QUALIFIED_STAFF = "no_qualified_staff"
    STAFF_CAPACITY_EXCEEDED = "staff_capacity_exceeded"
    INSUFFICIENT_CLASSROOM_CAPACITY = "insufficient_classroom_capacity"
    INSUFFICIENT_TUTORS = "insufficient_tutors"

    # Cross-department usage
    CROSS_DEPARTMENT_STAFF_OVERLOAD = "cross_department_staff_overload"
    CROSS_DEPARTMENT_CLASSROOM_OVERUSE = "cross_department_classroom_overuse"
    CROSS_DEPARTMENT_STAFF_CLASH = "cross_department_staff_clash"
    CROSS_DEPARTMENT_CLASSROOM_CLASH = "cross_department_classroom_clash"

    # Generated schedule
    STAFF = "staff"
    CLASSROOM = "classroom"
    UNSCHEDULABLE_SESSION = "unschedulable_session"


# =============================================================================
# Helper Functions
# =============================================================================

def slot_key(day: str, time: str) -> str:
    """Key identifying a day/time window, e.g. 'Monday-09:00-10:00'."""
    return f"{day}-{time}"


def start_hour(time: str) -> Optional[int]:
    """Hour at which a period label such as '13:15-14:15' starts."""
    try:
        return int(time.split(":")[0])
    except ValueError:
        return None


def day_index(day: str) -> int:
    """Position of a day name in the week (unknown names sort last)."""
    try:
        return DAY_NAMES.index(day.capitalize())
    except ValueError:
        return len(DAY_NAMES)


class Record(BaseModel):
    """Base for all records: immutable, strict, camelCase aliases."""
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _coerce_optional_str(value: Any) -> Any:
    # Years and semesters arrive as numbers from some stores
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# =============================================================================
# Core Entity Models
# =============================================================================

class Subject(Record):
    """A course offering."""

    code: str = Field(min_length=1, description="Subject code, e.g. 'CS8391'")
    name: str = Field(min_length=1, description="Subject name")
    id: Optional[str] = Field(default=None, description="Store identifier")
    credits: int = Field(default=3, ge=0, le=20)
    type: SubjectType = Field(default=SubjectType.THEORY)
    duration: int = Field(default=1, ge=1, le=8, description="Periods per session")
    hours_per_week: int = Field(default=1, ge=1, le=40, description="Periods per week")
    department: Optional[str] = Field(default=None)
    year: Optional[str] = Field(default=None)
    semester: Optional[str] = Field(default=None)
    preferred_staff: list[str] = Field(default_factory=list, description="Preferred staff IDs or names")
    is_active: bool = Field(default=True)

    coerce_year = field_validator("year", "semester", mode="before")(_coerce_optional_str)

    @field_validator("preferred_staff", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return value or []

    @property
    def is_lab(self) -> bool:
        return self.type == SubjectType.LAB

    @property
    def sessions_per_week(self) -> int:
        """Number of sessions needed to cover hours_per_week."""
        return -(-self.hours_per_week // self.duration)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Staff(Record):
    """A faculty member."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: Optional[str] = Field(default=None)
    department: Optional[str] = Field(default=None)
    role: str = Field(default="AsstProf", description="Prof, AssocProf or AsstProf")
    max_hours: int = Field(ge=0, le=60, description="Weekly teaching ceiling")
    current_hours: int = Field(default=0, ge=0, le=60, description="Hours already allocated")
    subjects: list[str] = Field(default_factory=list, description="Qualified subject codes or IDs")
    is_active: bool = Field(default=True)

    @model_validator(mode="before")
    @classmethod
    def default_max_hours_from_role(cls, data: Any) -> Any:
        """Fill max_hours from the role when the record leaves it out."""
        if not isinstance(data, dict):
            return data
        if data.get("max_hours") is None and data.get("maxHours") is None:
            data = {k: v for k, v in data.items() if k not in ("max_hours", "maxHours")}
            role = data.get("role") or "AsstProf"
            data["max_hours"] = ROLE_MAX_HOURS.get(role, DEFAULT_MAX_HOURS)
        return data

    @field_validator("subjects", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return value or []

    @property
    def remaining_hours(self) -> int:
        return self.max_hours - self.current_hours

    @property
    def is_overloaded(self) -> bool:
        return self.current_hours >= self.max_hours

    def can_teach(self, subject: Subject) -> bool:
        """
        Whether this staff member is explicitly qualified for a subject.

        Qualification lists hold subject codes or store IDs; matching is exact
        and case-insensitive.
        """
        if not self.is_active:
            return False
        keys = {subject.code.lower()}
        if subject.id:
            keys.add(subject.id.lower())
        return any(s.lower() in keys for s in self.subjects)

    def is_preferred_for(self, subject: Subject) -> bool:
        preferred = {p.lower() for p in subject.preferred_staff}
        return self.id.lower() in preferred or self.name.lower() in preferred

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Classroom(Record):
    """A bookable room."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    type: RoomType = Field(default=RoomType.LECTURE)
    capacity: int = Field(ge=1)
    department: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.type.value}, {self.capacity})"


class TimeSlot(Record):
    """A schedulable day + time window."""

    day: str = Field(min_length=1)
    time: str = Field(min_length=1, description="Period label, e.g. '09:00-10:00'")
    duration: int = Field(default=1, ge=1)

    @property
    def key(self) -> str:
        return slot_key(self.day, self.time)

    def __str__(self) -> str:
        return f"{self.day} {self.time}"


class StudentGroup(Record):
    """A cohort of students taught together."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    department: Optional[str] = Field(default=None)
    year: Optional[str] = Field(default=None)
    semester: Optional[str] = Field(default=None)
    strength: int = Field(ge=1, description="Number of students")

    coerce_year = field_validator("year", "semester", mode="before")(_coerce_optional_str)


class TimetableEntry(Record):
    """
    One scheduled session.

    Entries are immutable; the search replaces an entry with an updated copy
    rather than editing it, so individuals never share mutable state.
    """

    id: str
    subject_code: str
    subject_name: str
    staff_id: str
    staff_name: str
    day: str
    time: str
    duration: int = Field(default=1, ge=1)
    classroom_id: str
    classroom_name: str
    session: int = Field(default=0, ge=0, description="Session index within the subject's week")
    department: Optional[str] = Field(default=None)

    @property
    def slot_key(self) -> str:
        return slot_key(self.day, self.time)

    def __str__(self) -> str:
        return (
            f"{self.subject_code} {self.day} {self.time} "
            f"({self.staff_name}, {self.classroom_name})"
        )


class Conflict(Record):
    """A detected problem, reported as data rather than raised."""

    type: ConflictType
    description: str
    severity: Severity
    entries: list[TimetableEntry] = Field(default_factory=list)

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.HIGH


class ValidationResult(Record):
    """Validator output. ``is_valid`` is derived from the conflicts."""

    conflicts: list[Conflict] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @computed_field(alias="isValid")
    @property
    def is_valid(self) -> bool:
        return not any(c.severity == Severity.HIGH for c in self.conflicts)

    def by_severity(self, severity: Severity) -> list[Conflict]:
        return [c for c in self.conflicts if c.severity == severity]

    def by_type(self, conflict_type: ConflictType) -> list[Conflict]:
        return [c for c in self.conflicts if c.type == conflict_type]


# =============================================================================
# Configuration Models
# =============================================================================

class DepartmentRequirements(Record):
    """Staffing, room and curriculum minimums for one department."""

    min_staff: int = Field(default=0, ge=0)
    required_subjects: list[str] = Field(default_factory=list)
    required_subjects_by_year: dict[str, list[str]] = Field(default_factory=dict)
    lab_subjects: list[str] = Field(default_factory=list)
    theory_subjects: list[str] = Field(default_factory=list)
    min_lecture_rooms: int = Field(default=0, ge=0)
    min_lab_rooms: int = Field(default=0, ge=0)

    def required_for_year(self, year: Optional[str]) -> list[str]:
        """Required subject codes for a year, falling back to the department list."""
        if year is not None and year in self.required_subjects_by_year:
            return self.required_subjects_by_year[year]
        return self.required_subjects


class SchedulingPreferences(Record):
    """Optional soft preferences on when sessions are placed."""

    prefer_morning: bool = Field(default=False)
    avoid_friday_afternoon: bool = Field(default=False)
    avoid_lunch_slot: bool = Field(default=False)
    lunch_time: str = Field(default="12:15-13:15")
    morning_cutoff_hour: int = Field(default=12, ge=0, le=23)
    afternoon_start_hour: int = Field(default=13, ge=0, le=23)

    @property
    def is_active(self) -> bool:
        return self.prefer_morning or self.avoid_friday_afternoon or self.avoid_lunch_slot

    def slot_score(self, day: str, time: str) -> float:
        """
        Score a slot on a 0-10 scale.

        Starts from a base of 100, then +20 for morning / -10 otherwise when
        mornings are preferred, -30 for Friday afternoons and -50 for the
        lunch slot. The result is clamped and scaled to 0-10.
        """
        score = 100
        hour = start_hour(time)

        if self.prefer_morning and hour is not None:
            score += 20 if hour < self.morning_cutoff_hour else -10

        if (
            self.avoid_friday_afternoon
            and day.lower() == "friday"
            and hour is not None
            and hour >= self.afternoon_start_hour
        ):
            score -= 30

        if self.avoid_lunch_slot and time == self.lunch_time:
            score -= 50

        return max(0.0, min(120.0, float(score))) / 12.0


# =============================================================================
# Request Model
# =============================================================================

def raise_on_duplicates(
    subjects: list[Subject],
    staff: list[Staff],
    classrooms: list[Classroom],
    slots: list[TimeSlot],
) -> None:
    """
    Raise ValueError listing every repeated subject code, staff ID,
    classroom ID or time slot.
    """
    errors: list[str] = []

    def check_duplicates(keys: list[str], entity_name: str) -> None:
        seen: set[str] = set()
        for key in keys:
            if key in seen:
                errors.append(f"Duplicate {entity_name}: '{key}'")
            seen.add(key)

    check_duplicates([s.code for s in subjects], "subject code")
    check_duplicates([s.id for s in staff], "staff ID")
    check_duplicates([c.id for c in classrooms], "classroom ID")
    check_duplicates([s.key for s in slots], "time slot")

    if errors:
        raise ValueError("Duplicate ID validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


class ScheduleRequest(Record):
    """
    Input for one scheduling run. Immutable for the duration of the run.
    """

    subjects: list[Subject] = Field(default_factory=list)
    staff: list[Staff] = Field(default_factory=list)
    available_slots: list[TimeSlot] = Field(default_factory=list)
    classrooms: list[Classroom] = Field(default_factory=list)
    department: str = Field(min_length=1)
    year: Optional[str] = Field(default=None)
    semester: Optional[str] = Field(default=None)
    preferences: Optional[SchedulingPreferences] = Field(default=None)

    coerce_year = field_validator("year", "semester", mode="before")(_coerce_optional_str)

    @model_validator(mode="after")
    def validate_no_duplicates(self) -> "ScheduleRequest":
        """Ensure identifiers are unique within each entity type."""
        raise_on_duplicates(self.subjects, self.staff, self.classrooms, self.available_slots)
        return self

    @property
    def total_sessions(self) -> int:
        return sum(s.sessions_per_week for s in self.subjects)

    def summary(self) -> dict[str, Any]:
        """Get a summary of the request."""
        return {
            "department": self.department,
            "year": self.year,
            "semester": self.semester,
            "subjects": len(self.subjects),
            "staff": len(self.staff),
            "classrooms": len(self.classrooms),
            "available_slots": len(self.available_slots),
            "total_sessions": self.total_sessions,
        }


# =============================================================================
# Dataset Model
# =============================================================================

class DepartmentDataset(Record):
    """
    Everything the store supplies for one department/year/semester.

    A single dataset feeds both the feasibility validator (which also needs
    student groups) and the scheduler (which needs the time slots).
    """

    department: str = Field(min_length=1)
    year: Optional[str] = Field(default=None)
    semester: Optional[str] = Field(default=None)
    subjects: list[Subject] = Field(default_factory=list)
    staff: list[Staff] = Field(default_factory=list)
    classrooms: list[Classroom] = Field(default_factory=list)
    student_groups: list[StudentGroup] = Field(default_factory=list)
    available_slots: list[TimeSlot] = Field(default_factory=list)
    preferences: Optional[SchedulingPreferences] = Field(default=None)
    requirements: dict[str, DepartmentRequirements] = Field(
        default_factory=dict,
        description="Department requirements overriding the built-in table",
    )

    coerce_year = field_validator("year", "semester", mode="before")(_coerce_optional_str)

    @model_validator(mode="after")
    def validate_no_duplicates(self) -> "DepartmentDataset":
        """The records that feed a schedule request must have unique identifiers."""
        raise_on_duplicates(
            self.scheduled_subjects(),
            self.department_staff(),
            self.department_classrooms(),
            self.available_slots,
        )
        return self

    def scheduled_subjects(self) -> list[Subject]:
        """Active subjects belonging to this department/year/semester."""
        return [
            s for s in self.subjects
            if s.is_active
            and (s.department is None or s.department == self.department)
            and (self.year is None or s.year is None or s.year == self.year)
            and (self.semester is None or s.semester is None or s.semester == self.semester)
        ]

    def department_staff(self) -> list[Staff]:
        return [s for s in self.staff if s.department in (None, self.department)]

    def department_classrooms(self) -> list[Classroom]:
        return [c for c in self.classrooms if c.is_active and c.department in (None, self.department)]

    def to_request(self) -> ScheduleRequest:
        """Build the scheduler input for this dataset."""
        return ScheduleRequest(
            subjects=self.scheduled_subjects(),
            staff=self.department_staff(),
            available_slots=self.available_slots,
            classrooms=self.department_classrooms(),
            department=self.department,
            year=self.year,
            semester=self.semester,
            preferences=self.preferences,
        )
