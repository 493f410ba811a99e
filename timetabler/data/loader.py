"""Load department datasets, requirement tables and timetables from JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from pydantic import TypeAdapter, ValidationError

from .models import DepartmentDataset, DepartmentRequirements, TimetableEntry

logger = logging.getLogger(__name__)

_REQUIREMENTS_ADAPTER = TypeAdapter(dict[str, DepartmentRequirements])
_ENTRIES_ADAPTER = TypeAdapter(list[TimetableEntry])

LIST_FIELDS = ["subjects", "staff", "classrooms", "studentGroups", "availableSlots"]


class DataValidationError(Exception):
    """Raised when an input file fails validation."""
    pass


def read_json(path: Union[str, Path]) -> Any:
    """
    Read a JSON document.

    Raises:
        FileNotFoundError: If the file doesn't exist
        DataValidationError: If the file isn't UTF-8 encoded JSON
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise DataValidationError(f"{path}: invalid JSON ({e})") from e
        except UnicodeDecodeError as e:
            raise DataValidationError(f"{path}: not UTF-8 text ({e})") from e


def validate_dataset_data(data: Any) -> None:
    """
    Check the top-level shape of a dataset document before model validation.

    Args:
        data: Parsed JSON document

    Raises:
        DataValidationError: If the structure is wrong
    """
    if not isinstance(data, dict):
        raise DataValidationError("Dataset must be a JSON object")

    errors = []

    if not data.get("department"):
        errors.append("Missing required field: department")

    for field in LIST_FIELDS:
        snake = "".join(f"_{c.lower()}" if c.isupper() else c for c in field)
        value = data.get(field, data.get(snake))
        if value is not None and not isinstance(value, list):
            errors.append(f"Field '{field}' must be a list")

    if errors:
        raise DataValidationError("; ".join(errors))


def load_dataset(path: Union[str, Path]) -> DepartmentDataset:
    """
    Load a department dataset.

    Keys may be camelCase (as exported by the web client) or snake_case.

    Args:
        path: Path to the JSON file

    Returns:
        Validated DepartmentDataset

    Raises:
        FileNotFoundError: If the file doesn't exist
        DataValidationError: If the data fails validation
    """
    data = read_json(path)
    validate_dataset_data(data)

    try:
        dataset = DepartmentDataset.model_validate(data)
    except ValidationError as e:
        raise DataValidationError(str(e)) from e

    logger.debug(
        "Loaded dataset for %s: %d subjects, %d staff, %d classrooms",
        dataset.department, len(dataset.subjects), len(dataset.staff), len(dataset.classrooms),
    )
    return dataset


def load_department_requirements(path: Union[str, Path]) -> dict[str, DepartmentRequirements]:
    """
    Load a department requirements table (department code -> requirements).

    Raises:
        DataValidationError: If the table is malformed
    """
    data = read_json(path)
    if not isinstance(data, dict):
        raise DataValidationError("Requirements must be a JSON object keyed by department")

    try:
        return _REQUIREMENTS_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise DataValidationError(str(e)) from e


def load_timetable_entries(path: Union[str, Path]) -> list[TimetableEntry]:
    """
    Load timetable entries.

    Accepts either a bare list of entries or a generated schedule document
    with a top-level ``schedule`` list.
    """
    data = read_json(path)
    if isinstance(data, dict):
        if "schedule" not in data:
            raise DataValidationError("Missing required field: schedule")
        data = data["schedule"]

    if not isinstance(data, list):
        raise DataValidationError("Timetable must be a list of entries")

    try:
        return _ENTRIES_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise DataValidationError(str(e)) from e
