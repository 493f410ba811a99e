"""
Fitness evaluation for candidate schedules.

Fitness is a weighted sum of component scores (0-10 except staff preference) minus
a conflict penalty. Higher is better.

Components:
- Staff preference: average points per entry, 1 for qualified staff and 2
  for preferred staff (0-2 rather than 0-10)
- Workload balance: low variance of periods per staff member
- Time distribution: low variance of entries per available slot
- Classroom utilization: share of classrooms in use
- Day balance: low variance of periods per day
- Slot preference: morning / Friday afternoon / lunch preferences, if any

Penalty: for each pair of entries in the same day and time, one staff clash
penalty when they share staff and one classroom clash penalty when they
share a room.

Evaluation reads only the candidate and the frozen context, so candidates
can be scored concurrently.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import Optional

from timetabler.data.models import Classroom, SchedulingPreferences, TimetableEntry

from .context import SchedulingContext
from .settings import FitnessWeights

MAX_COMPONENT_SCORE = 10.0


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class FitnessBreakdown:
    """Component scores of one candidate, before weighting."""
    staff_preference: float
    workload_balance: float
    time_distribution: float
    classroom_utilization: float
    day_balance: float
    slot_preference: float
    penalty: float
    total: float

    def to_dict(self) -> dict[str, float]:
        return {
            "staffPreference": round(self.staff_preference, 4),
            "workloadBalance": round(self.workload_balance, 4),
            "timeDistribution": round(self.time_distribution, 4),
            "classroomUtilization": round(self.classroom_utilization, 4),
            "dayBalance": round(self.day_balance, 4),
            "slotPreference": round(self.slot_preference, 4),
            "penalty": round(self.penalty, 4),
            "total": round(self.total, 4),
        }


# =============================================================================
# Helpers
# =============================================================================

def variance(values: Iterable[float]) -> float:
    """Population variance; 0 for an empty sequence."""
    values = list(values)
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def clashing_pairs(schedule: Sequence[TimetableEntry]) -> Iterable[tuple[TimetableEntry, TimetableEntry]]:
    """Every unordered pair of entries booked in the same day and time."""
    by_slot: dict[str, list[TimetableEntry]] = {}
    for entry in schedule:
        by_slot.setdefault(entry.slot_key, []).append(entry)

    for entries in by_slot.values():
        yield from combinations(entries, 2)


# =============================================================================
# Component Scores
# =============================================================================

def staff_preference_score(schedule: Sequence[TimetableEntry], context: SchedulingContext) -> float:
    """Average qualification points per entry (1 qualified, 2 preferred)."""
    if not schedule:
        return 0.0

    points = 0
    for entry in schedule:
        subject = context.subjects_by_code.get(entry.subject_code)
        if subject is None:
            continue
        staff = next((s for s in context.qualified_for(subject.code) if s.id == entry.staff_id), None)
        if staff is None:
            continue
        points += 2 if staff.is_preferred_for(subject) else 1

    return points / len(schedule)


def workload_balance_score(schedule: Sequence[TimetableEntry]) -> float:
    """``max(0, 10 - variance(periods per staff) / 10)``."""
    workload: Counter[str] = Counter()
    for entry in schedule:
        workload[entry.staff_id] += entry.duration
    return max(0.0, MAX_COMPONENT_SCORE - variance(workload.values()) / 10)


def time_distribution_score(schedule: Sequence[TimetableEntry], slot_keys: Sequence[str]) -> float:
    """``max(0, 10 - variance(entries per slot))``, counting empty slots."""
    counts: Counter[str] = Counter({key: 0 for key in slot_keys})
    for entry in schedule:
        counts[entry.slot_key] += 1
    return max(0.0, MAX_COMPONENT_SCORE - variance(counts.values()))


def classroom_utilization_score(
    schedule: Sequence[TimetableEntry],
    classrooms: Sequence[Classroom],
) -> float:
    """Share of available classrooms that are used at least once, scaled to 0-10."""
    if not classrooms:
        return 0.0
    used = {entry.classroom_id for entry in schedule}
    return len(used) / len(classrooms) * MAX_COMPONENT_SCORE


def day_balance_score(schedule: Sequence[TimetableEntry], days: Sequence[str]) -> float:
    """``max(0, 10 - variance(periods per day) / 5)``, counting empty days."""
    per_day: Counter[str] = Counter({day: 0 for day in days})
    for entry in schedule:
        per_day[entry.day] += entry.duration
    return max(0.0, MAX_COMPONENT_SCORE - variance(per_day.values()) / 5)


def slot_preference_score(
    schedule: Sequence[TimetableEntry],
    preferences: Optional[SchedulingPreferences],
) -> float:
    """Mean slot score under the request's preferences; 0 when there are none."""
    if not schedule or preferences is None or not preferences.is_active:
        return 0.0
    return sum(preferences.slot_score(e.day, e.time) for e in schedule) / len(schedule)


def conflict_penalty(schedule: Sequence[TimetableEntry], weights: FitnessWeights) -> float:
    """Total clash penalty over all same-slot pairs."""
    penalty = 0.0
    for first, second in clashing_pairs(schedule):
        if first.staff_id == second.staff_id:
            penalty += weights.staff_clash
        if first.classroom_id == second.classroom_id:
            penalty += weights.classroom_clash
    return penalty


# =============================================================================
# Evaluation
# =============================================================================

def fitness_breakdown(
    schedule: Sequence[TimetableEntry],
    context: SchedulingContext,
    weights: Optional[FitnessWeights] = None,
) -> FitnessBreakdown:
    """
    Score a candidate schedule component by component.

    Args:
        schedule: Candidate entries
        context: Reference data for the run
        weights: Component weights and clash penalties (defaults if None)

    Returns:
        FitnessBreakdown; an empty schedule scores 0 overall
    """
    weights = weights or FitnessWeights()

    if not schedule:
        return FitnessBreakdown(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    staff = staff_preference_score(schedule, context)
    workload = workload_balance_score(schedule)
    spread = time_distribution_score(schedule, context.slot_keys)
    rooms = classroom_utilization_score(schedule, context.classrooms)
    days = day_balance_score(schedule, context.days)
    slots = slot_preference_score(schedule, context.preferences)
    penalty = conflict_penalty(schedule, weights)

    total = (
        staff * weights.staff_preference
        + workload * weights.workload_balance
        + spread * weights.time_distribution
        + rooms * weights.classroom_utilization
        + days * weights.day_balance
        + slots * weights.slot_preference
        - penalty
    )

    return FitnessBreakdown(
        staff_preference=staff,
        workload_balance=workload,
        time_distribution=spread,
        classroom_utilization=rooms,
        day_balance=days,
        slot_preference=slots,
        penalty=penalty,
        total=total,
    )


def evaluate_fitness(
    schedule: Sequence[TimetableEntry],
    context: SchedulingContext,
    weights: Optional[FitnessWeights] = None,
) -> float:
    """Scalar fitness of a candidate schedule (higher is better)."""
    return fitness_breakdown(schedule, context, weights).total
