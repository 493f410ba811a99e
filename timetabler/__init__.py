"""Academic timetable scheduling with feasibility validation and a genetic algorithm."""

from .engine.scheduler import generate_optimized_schedule
from .engine.settings import FitnessWeights, GeneticSettings
from .output.schema import ScheduleResult
from .validation.cross_department import validate_cross_department_conflicts
from .validation.feasibility import FeasibilityValidator, validate_pre_scheduling_requirements
from .cli import app as cli_app

__all__ = [
    # Library API
    "validate_pre_scheduling_requirements",
    "validate_cross_department_conflicts",
    "generate_optimized_schedule",
    "FeasibilityValidator",
    "GeneticSettings",
    "FitnessWeights",
    "ScheduleResult",
    # CLI
    "cli_app",
]
