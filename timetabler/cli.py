"""
Command-line interface for the timetable scheduler.

Usage:
    python -m timetabler validate dataset.json
    python -m timetabler generate dataset.json -o timetable.json --seed 42
    python -m timetabler cross-check dataset.json --timetable timetable.json
    python -m timetabler sample -o dataset.json
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .data.generator import GeneratorConfig, generate_sample_dataset, save_generated_dataset
from .data.loader import (
    DataValidationError,
    load_dataset,
    load_department_requirements,
    load_timetable_entries,
)
from .data.models import DepartmentDataset, DepartmentRequirements, TimetableEntry, ValidationResult
from .engine.scheduler import generate_optimized_schedule
from .engine.settings import GeneticSettings
from .output.formatters import ConsoleFormatter, build_conflict_table, save_csv, save_json
from .validation.cross_department import validate_cross_department_conflicts
from .validation.feasibility import DEFAULT_DEPARTMENT_REQUIREMENTS, FeasibilityValidator

# Create Typer app
app = typer.Typer(
    name="timetabler",
    help="Academic timetable generator using a genetic algorithm.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()


class OutputFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


# =============================================================================
# Helper Functions
# =============================================================================

def setup_logging(verbose: bool = False) -> None:
    """
    Route library logging through rich.

    Safe to call multiple times (won't double-add handlers); later calls
    only adjust the level.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger("timetabler")
    root.setLevel(level)

    if any(isinstance(h, RichHandler) for h in root.handlers):
        return

    handler = RichHandler(show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)


def load_input(input_path: Path) -> DepartmentDataset:
    """Load a dataset, exiting with code 1 on any input problem."""
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(code=1)

    try:
        return load_dataset(input_path)
    except (DataValidationError, OSError) as e:
        console.print(f"[red]Error loading input:[/red] {e}")
        raise typer.Exit(code=1)


def load_entries(path: Path) -> list[TimetableEntry]:
    if not path.exists():
        console.print(f"[red]Error:[/red] Timetable file not found: {path}")
        raise typer.Exit(code=1)

    try:
        return load_timetable_entries(path)
    except (DataValidationError, OSError) as e:
        console.print(f"[red]Error loading timetable:[/red] {e}")
        raise typer.Exit(code=1)


def resolve_requirements(
    dataset: DepartmentDataset,
    requirements_file: Optional[Path],
) -> dict[str, DepartmentRequirements]:
    """Built-in table, overridden by the dataset, overridden by a requirements file."""
    requirements = dict(DEFAULT_DEPARTMENT_REQUIREMENTS)
    requirements.update(dataset.requirements)

    if requirements_file is not None:
        try:
            requirements.update(load_department_requirements(requirements_file))
        except (DataValidationError, OSError) as e:
            console.print(f"[red]Error loading requirements:[/red] {e}")
            raise typer.Exit(code=1)

    return requirements


def run_validation(
    dataset: DepartmentDataset,
    requirements: dict[str, DepartmentRequirements],
) -> ValidationResult:
    validator = FeasibilityValidator(requirements)
    return validator.validate(
        dataset.subjects,
        dataset.staff,
        dataset.classrooms,
        dataset.student_groups,
        dataset.department,
        dataset.year,
        dataset.semester,
    )


def print_validation(result: ValidationResult, title: str = "Feasibility Conflicts") -> None:
    if result.conflicts:
        console.print(build_conflict_table(result.conflicts, title=title))
    else:
        console.print("[green]No conflicts found[/green]")

    if result.recommendations:
        console.print("\n[bold]Recommendations:[/bold]")
        for recommendation in result.recommendations:
            console.print(f"  - {recommendation}")


def print_dataset_summary(dataset: DepartmentDataset) -> None:
    table = Table(title="Summary", show_header=False, box=None)
    table.add_column("Entity", style="cyan")
    table.add_column("Count", style="white")

    table.add_row("Department", dataset.department)
    table.add_row("Year / Semester", f"{dataset.year or '-'} / {dataset.semester or '-'}")
    table.add_row("Subjects", str(len(dataset.subjects)))
    table.add_row("Staff", str(len(dataset.staff)))
    table.add_row("Classrooms", str(len(dataset.classrooms)))
    table.add_row("Student groups", str(len(dataset.student_groups)))
    table.add_row("Time slots", str(len(dataset.available_slots)))

    console.print(table)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def validate(
    input_file: Path = typer.Argument(
        ...,
        help="Path to department dataset JSON file",
    ),
    requirements_file: Optional[Path] = typer.Option(
        None,
        "--requirements", "-r",
        help="JSON file overriding department requirements",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """
    Check whether a department can be scheduled.

    Runs the feasibility checks (staff, classrooms, subjects, qualifications,
    capacities, tutors). Exits with code 1 if any conflict is high severity.

    Example:
        python -m timetabler validate dataset.json
    """
    setup_logging(verbose)
    console.print(f"\n[bold]Validating:[/bold] {input_file}\n")

    dataset = load_input(input_file)
    print_dataset_summary(dataset)

    result = run_validation(dataset, resolve_requirements(dataset, requirements_file))
    console.print()
    print_validation(result)

    if not result.is_valid:
        console.print("\n[red]Validation failed.[/red]\n")
        raise typer.Exit(code=1)

    console.print("\n[green]Validation passed.[/green]\n")


@app.command()
def generate(
    input_file: Path = typer.Argument(
        ...,
        help="Path to department dataset JSON file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Path to write the generated timetable",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.JSON,
        "--format", "-f",
        help="Output file format",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed", "-s",
        help="Random seed for reproducible results",
        min=0,
    ),
    generations: int = typer.Option(
        100,
        "--generations", "-g",
        help="Number of generations",
        min=0,
    ),
    population: int = typer.Option(
        50,
        "--population", "-p",
        help="Population size",
        min=2,
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout", "-t",
        help="Stop the search after this many seconds",
    ),
    skip_validation: bool = typer.Option(
        False,
        "--skip-validation",
        help="Generate even if feasibility validation fails",
    ),
    requirements_file: Optional[Path] = typer.Option(
        None,
        "--requirements", "-r",
        help="JSON file overriding department requirements",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """
    Generate a timetable for a department.

    Validates the dataset first (unless --skip-validation), then runs the
    genetic search and prints the best timetable found.

    Example:
        python -m timetabler generate dataset.json -o timetable.json --seed 42
    """
    setup_logging(verbose)
    console.print(f"\n[bold]Loading input from:[/bold] {input_file}")

    dataset = load_input(input_file)
    request = dataset.to_request()

    console.print(f"[green]Loaded:[/green] {len(request.subjects)} subjects, "
                  f"{len(request.staff)} staff, {len(request.classrooms)} classrooms, "
                  f"{request.total_sessions} sessions")

    if not skip_validation:
        result = run_validation(dataset, resolve_requirements(dataset, requirements_file))
        if not result.is_valid:
            print_validation(result)
            console.print("\n[red]Validation failed; use --skip-validation to generate anyway.[/red]\n")
            raise typer.Exit(code=1)

    defaults = GeneticSettings()
    try:
        settings = GeneticSettings(
            population_size=population,
            generations=generations,
            elite_count=min(defaults.elite_count, population - 1),
            tournament_size=min(defaults.tournament_size, population),
            seed=seed,
            time_limit_seconds=timeout,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid settings:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]Searching ({generations} generations, population {population})...[/bold]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Evolving timetable...", total=None)
        schedule = generate_optimized_schedule(request, settings)

    console.print()
    ConsoleFormatter().print(schedule, console)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        if output_format == OutputFormat.CSV:
            save_csv(schedule, output)
        else:
            save_json(schedule, output)
        console.print(f"\n[green]Timetable saved to:[/green] {output}")

    console.print()


@app.command("cross-check")
def cross_check(
    input_file: Path = typer.Argument(
        ...,
        help="Dataset JSON file with institution-wide staff and classrooms",
    ),
    timetable: Path = typer.Option(
        ...,
        "--timetable", "-t",
        help="Proposed timetable (generated JSON or a list of entries)",
    ),
    existing: Optional[Path] = typer.Option(
        None,
        "--existing", "-e",
        help="Timetable already committed by other departments",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """
    Check a proposed timetable against shared staff and classrooms.

    Cross-department conflicts are advisory and never fail the command.

    Example:
        python -m timetabler cross-check dataset.json --timetable timetable.json
    """
    setup_logging(verbose)

    dataset = load_input(input_file)
    proposed = load_entries(timetable)
    committed = load_entries(existing) if existing else None

    result = validate_cross_department_conflicts(
        dataset.staff,
        dataset.classrooms,
        dataset.department,
        proposed,
        committed,
    )

    console.print(Panel(
        f"{len(proposed)} proposed entries for {dataset.department}",
        title="Cross-Department Check",
    ))
    print_validation(result, title="Cross-Department Conflicts")
    console.print()


@app.command()
def sample(
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Path to write the sample dataset (prints to stdout if omitted)",
    ),
    department: str = typer.Option(
        "CSE",
        "--department", "-d",
        help="Department code",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed", "-s",
        help="Random seed for reproducible data",
    ),
    preferences: bool = typer.Option(
        False,
        "--preferences",
        help="Include morning / Friday afternoon / lunch preferences",
    ),
) -> None:
    """
    Generate a sample department dataset.

    Example:
        python -m timetabler sample -o dataset.json --seed 1
    """
    dataset = generate_sample_dataset(GeneratorConfig(
        department=department,
        seed=seed,
        with_preferences=preferences,
    ))

    if output is None:
        console.print_json(dataset.model_dump_json(by_alias=True, exclude_none=True))
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    save_generated_dataset(dataset, output)
    console.print(f"[green]Sample dataset saved to:[/green] {output}")


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
