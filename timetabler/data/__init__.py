"""Data models, loading and sample generation."""

from .loader import (
    DataValidationError,
    load_dataset,
    load_department_requirements,
    load_timetable_entries,
    validate_dataset_data,
)
from .generator import (
    GeneratorConfig,
    generate_sample_dataset,
    save_generated_dataset,
    get_generation_stats,
)

__all__ = [
    # Loader
    "DataValidationError",
    "load_dataset",
    "load_department_requirements",
    "load_timetable_entries",
    "validate_dataset_data",
    # Generator
    "GeneratorConfig",
    "generate_sample_dataset",
    "save_generated_dataset",
    "get_generation_stats",
]
