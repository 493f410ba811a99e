"""Genetic-algorithm timetable search."""

from .conflicts import detect_conflicts
from .context import SchedulingContext
from .fitness import FitnessBreakdown, evaluate_fitness, fitness_breakdown
from .genetic import GeneticScheduler, SearchOutcome, SearchStatus, crossover, mutate, tournament_select
from .initializer import create_individual, create_population, find_unschedulable_sessions
from .scheduler import generate_optimized_schedule
from .settings import FitnessWeights, GeneticSettings
from .statistics import calculate_statistics

__all__ = [
    "FitnessBreakdown",
    "FitnessWeights",
    "GeneticScheduler",
    "GeneticSettings",
    "SchedulingContext",
    "SearchOutcome",
    "SearchStatus",
    "calculate_statistics",
    "create_individual",
    "create_population",
    "crossover",
    "detect_conflicts",
    "evaluate_fitness",
    "find_unschedulable_sessions",
    "fitness_breakdown",
    "generate_optimized_schedule",
    "mutate",
    "tournament_select",
]
