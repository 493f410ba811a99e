"""
Scheduling entry point.

Runs the genetic search for a request and annotates the best schedule with
detected conflicts and statistics. Sessions that cannot be placed at all
are reported as high-severity conflicts rather than silently dropped.
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import Executor
from typing import Any, Optional

from timetabler.data.models import ScheduleRequest
from timetabler.output.schema import OutputStatus, ScheduleResult

from .conflicts import detect_conflicts
from .context import SchedulingContext
from .fitness import fitness_breakdown
from .genetic import GeneticScheduler
from .initializer import find_unschedulable_sessions
from .settings import GeneticSettings
from .statistics import calculate_statistics

logger = logging.getLogger(__name__)


def generate_optimized_schedule(
    request: ScheduleRequest,
    settings: Optional[GeneticSettings] = None,
    rng: Optional[random.Random] = None,
    cancel_event: Any = None,
    executor: Optional[Executor] = None,
) -> ScheduleResult:
    """
    Generate a timetable for a request.

    Args:
        request: Subjects, staff, slots and classrooms to schedule
        settings: Search settings (defaults if None)
        rng: Random source; if None a fresh one is seeded from ``settings.seed``
        cancel_event: Any object with ``is_set()`` to stop the search early
        executor: Optional executor for parallel fitness evaluation

    Returns:
        ScheduleResult with the best schedule found, its conflicts and statistics
    """
    settings = settings or GeneticSettings()
    context = SchedulingContext.from_request(request)

    logger.info(
        "Scheduling %s: %d subjects, %d staff, %d slots, %d classrooms",
        request.department, len(request.subjects), len(request.staff),
        len(request.available_slots), len(request.classrooms),
    )

    unschedulable = find_unschedulable_sessions(context)
    for conflict in unschedulable:
        logger.warning(conflict.description)

    outcome = GeneticScheduler(context, settings, rng=rng, executor=executor).run(cancel_event)

    conflicts = detect_conflicts(outcome.best) + unschedulable
    statistics = calculate_statistics(
        outcome.best, request.available_slots, request.classrooms, conflicts,
    )

    logger.info(
        "Generated %d entries with %d conflicts (fitness %.3f)",
        len(outcome.best), len(conflicts), outcome.fitness,
    )

    return ScheduleResult(
        schedule=outcome.best,
        conflicts=conflicts,
        statistics=statistics,
        fitness=outcome.fitness,
        fitness_breakdown=fitness_breakdown(outcome.best, context, settings.weights).to_dict(),
        status=OutputStatus(outcome.status.value),
        generations_run=outcome.generations_run,
        fitness_history=outcome.fitness_history,
        solve_time_seconds=outcome.elapsed_seconds,
    )
