"""
Genetic search over candidate schedules.

Each generation:
1. Evaluate every candidate
2. Rank by fitness (highest first)
3. Copy the top ``elite_count`` unchanged into the next generation
4. Fill the rest with children: tournament-selected parents, single-point
   crossover, then (with probability ``mutation_rate``) one mutated gene

After the last generation the population is evaluated once more and the
best candidate is returned. Cancellation and the time limit are checked
once per generation; an early stop still returns the best candidate seen.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from concurrent.futures import Executor
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from time import perf_counter
from typing import Any, Optional

from timetabler.data.models import TimetableEntry

from .context import SchedulingContext
from .fitness import evaluate_fitness
from .initializer import create_population
from .settings import GeneticSettings

logger = logging.getLogger(__name__)

Individual = list[TimetableEntry]


class SearchStatus(str, Enum):
    """How a search run ended."""
    COMPLETED = "completed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass
class SearchOutcome:
    """Best candidate of a search run plus run statistics."""
    best: Individual
    fitness: float
    status: SearchStatus
    generations_run: int
    fitness_history: list[float] = field(default_factory=list)
    elapsed_seconds: float = 0.0


# =============================================================================
# Genetic Operators
# =============================================================================

def tournament_select(
    population: Sequence[Individual],
    scores: Sequence[float],
    tournament_size: int,
    rng: random.Random,
) -> Individual:
    """Pick ``tournament_size`` distinct candidates and return the fittest."""
    contenders = rng.sample(range(len(population)), tournament_size)
    best_index = max(contenders, key=lambda idx: scores[idx])
    return population[best_index]


def crossover_at(parent1: Sequence[TimetableEntry], parent2: Sequence[TimetableEntry], point: int) -> Individual:
    """``parent1[:point] + parent2[point:]``."""
    return list(parent1[:point]) + list(parent2[point:])


def crossover(
    parent1: Sequence[TimetableEntry],
    parent2: Sequence[TimetableEntry],
    rng: random.Random,
) -> Individual:
    """
    Single-point crossover.

    The cut point is drawn uniformly from ``[0, min(len(parent1), len(parent2)))``,
    or is 0 when either parent is empty.
    """
    shortest = min(len(parent1), len(parent2))
    point = rng.randrange(shortest) if shortest else 0
    return crossover_at(parent1, parent2, point)


def mutate(individual: Sequence[TimetableEntry], context: SchedulingContext, rng: random.Random) -> Individual:
    """
    Re-roll one gene of one random entry.

    The gene is chosen uniformly among staff (from the subject's qualified
    staff), time slot and classroom. Entries are immutable, so the mutated
    entry is a copy and the input list is left untouched.
    """
    mutated = list(individual)
    if not mutated:
        return mutated

    index = rng.randrange(len(mutated))
    entry = mutated[index]
    gene = rng.randrange(3)

    if gene == 0:
        qualified = context.qualified_for(entry.subject_code)
        if qualified:
            staff = rng.choice(qualified)
            entry = entry.model_copy(update={"staff_id": staff.id, "staff_name": staff.name})
    elif gene == 1:
        if context.slots:
            slot = rng.choice(context.slots)
            entry = entry.model_copy(update={"day": slot.day, "time": slot.time})
    else:
        if context.classrooms:
            room = rng.choice(context.classrooms)
            entry = entry.model_copy(update={"classroom_id": room.id, "classroom_name": room.name})

    mutated[index] = entry
    return mutated


# =============================================================================
# Search Loop
# =============================================================================

class GeneticScheduler:
    """
    Evolves a population of candidate schedules for one context.

    The scheduler owns nothing shared: the context is frozen, entries are
    immutable and all randomness comes from the injected ``rng``.

    Args:
        context: Reference data for the run
        settings: Population and operator settings
        rng: Random source (a fresh one seeded from ``settings.seed`` if None)
        executor: Optional executor used to evaluate candidates in parallel
    """

    def __init__(
        self,
        context: SchedulingContext,
        settings: Optional[GeneticSettings] = None,
        rng: Optional[random.Random] = None,
        executor: Optional[Executor] = None,
    ):
        self.context = context
        self.settings = settings or GeneticSettings()
        self.rng = rng if rng is not None else random.Random(self.settings.seed)
        self.executor = executor

    def evaluate_population(self, population: Sequence[Individual]) -> list[float]:
        """Fitness of every candidate, in population order."""
        evaluate = partial(evaluate_fitness, context=self.context, weights=self.settings.weights)
        if self.executor is None:
            return [evaluate(individual) for individual in population]
        return list(self.executor.map(evaluate, population))

    def breed(self, ranked: Sequence[Individual], scores: Sequence[float]) -> list[Individual]:
        """
        Build the next generation from a ranked population.

        Args:
            ranked: Candidates sorted best first
            scores: Fitness of each candidate in ``ranked``

        Returns:
            Elites followed by new children, ``population_size`` in total
        """
        settings = self.settings
        next_population = [list(individual) for individual in ranked[:settings.elite_count]]

        while len(next_population) < settings.population_size:
            parent1 = tournament_select(ranked, scores, settings.tournament_size, self.rng)
            parent2 = tournament_select(ranked, scores, settings.tournament_size, self.rng)
            child = crossover(parent1, parent2, self.rng)
            if self.rng.random() < settings.mutation_rate:
                child = mutate(child, self.context, self.rng)
            next_population.append(child)

        return next_population

    def stop_reason(self, cancel_event: Any, started: float) -> Optional[SearchStatus]:
        """Return why the search must stop now, or None to continue."""
        if cancel_event is not None and cancel_event.is_set():
            return SearchStatus.CANCELLED
        limit = self.settings.time_limit_seconds
        if limit is not None and perf_counter() - started >= limit:
            return SearchStatus.TIMEOUT
        return None

    def run(self, cancel_event: Any = None) -> SearchOutcome:
        """
        Run the search.

        Args:
            cancel_event: Any object with ``is_set()`` (e.g. ``threading.Event``)

        Returns:
            SearchOutcome with the best candidate found
        """
        settings = self.settings
        started = perf_counter()

        population = create_population(self.context, self.rng, settings.population_size)
        history: list[float] = []
        status = SearchStatus.COMPLETED
        generations_run = 0

        logger.info(
            "Starting genetic search: population=%d generations=%d elite=%d",
            settings.population_size, settings.generations, settings.elite_count,
        )

        for generation in range(settings.generations):
            reason = self.stop_reason(cancel_event, started)
            if reason is not None:
                status = reason
                logger.warning("Search stopped early (%s) after %d generations", reason.value, generation)
                break

            scores = self.evaluate_population(population)
            order = sorted(range(len(population)), key=lambda idx: scores[idx], reverse=True)
            ranked = [population[idx] for idx in order]
            ranked_scores = [scores[idx] for idx in order]

            history.append(ranked_scores[0])
            logger.debug("Generation %d: best fitness %.3f", generation, ranked_scores[0])

            population = self.breed(ranked, ranked_scores)
            generations_run += 1

        scores = self.evaluate_population(population)
        best_index = max(range(len(population)), key=lambda idx: scores[idx])
        history.append(scores[best_index])

        elapsed = perf_counter() - started
        logger.info(
            "Genetic search %s: %d generations, best fitness %.3f in %.2fs",
            status.value, generations_run, scores[best_index], elapsed,
        )

        return SearchOutcome(
            best=population[best_index],
            fitness=scores[best_index],
            status=status,
            generations_run=generations_run,
            fitness_history=history,
            elapsed_seconds=elapsed,
        )
