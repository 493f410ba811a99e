"""Feasibility and cross-department validation."""

from .feasibility import (
    DEFAULT_DEPARTMENT_REQUIREMENTS,
    CheckResult,
    FeasibilityValidator,
    validate_pre_scheduling_requirements,
)
from .cross_department import validate_cross_department_conflicts

__all__ = [
    "DEFAULT_DEPARTMENT_REQUIREMENTS",
    "CheckResult",
    "FeasibilityValidator",
    "validate_pre_scheduling_requirements",
    "validate_cross_department_conflicts",
]
