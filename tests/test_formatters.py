"""Tests for output formatters."""

from __future__ import annotations

import csv
import json
from io import StringIO

import pytest
from rich.console import Console

from timetabler.data.models import Conflict, ConflictType, Severity, TimetableEntry
from timetabler.output.formatters import (
    ConsoleFormatter,
    CSVFormatter,
    JSONFormatter,
    StaffViewFormatter,
    build_conflict_table,
    build_week_grid,
    format_console,
    format_csv,
    format_json,
    format_staff_view,
    save_csv,
    save_json,
)
from timetabler.output.schema import OutputStatus, ScheduleResult, ScheduleStatistics, create_views


def make_entry(
    entry_id: str,
    code: str,
    day: str,
    time: str,
    staff_id: str = "s1",
    staff_name: str = "Dr. Rao",
    room_id: str = "r1",
    room_name: str = "Room 101",
) -> TimetableEntry:
    return TimetableEntry(
        id=entry_id,
        subject_code=code,
        subject_name=f"Subject {code}",
        staff_id=staff_id,
        staff_name=staff_name,
        day=day,
        time=time,
        classroom_id=room_id,
        classroom_name=room_name,
    )


@pytest.fixture
def sample_schedule() -> list[TimetableEntry]:
    """Three entries, deliberately out of week order."""
    return [
        make_entry("e1", "CS101", "Wednesday", "10:00-11:00"),
        make_entry("e2", "CS102", "Monday", "10:00-11:00", staff_id="s2", staff_name="Dr. Nair",
                   room_id="r2", room_name="Lab 1"),
        make_entry("e3", "CS103", "Monday", "09:00-10:00"),
    ]


@pytest.fixture
def sample_result(sample_schedule) -> ScheduleResult:
    return ScheduleResult(
        schedule=sample_schedule,
        statistics=ScheduleStatistics(
            utilization_rate=0.25,
            total_entries=3,
            total_duration=3,
            efficiency_score=99.9,
        ),
        fitness=123.45,
        status=OutputStatus.COMPLETED,
        generations_run=10,
        fitness_history=[100.0, 123.45],
        solve_time_seconds=0.5,
    )


@pytest.fixture
def conflicted_result(sample_result) -> ScheduleResult:
    conflict = Conflict(
        type=ConflictType.STAFF,
        description="Dr. Rao has multiple classes at Monday 09:00-10:00: CS103 and CS104",
        severity=Severity.HIGH,
    )
    return sample_result.model_copy(update={"conflicts": [conflict]})


class TestJSONFormatter:
    """Tests for JSONFormatter class."""

    def test_format_produces_valid_json(self, sample_result):
        """Format produces valid JSON string."""
        data = json.loads(JSONFormatter().format(sample_result))

        assert data["status"] == "completed"
        assert len(data["schedule"]) == 3
        assert data["hasHardConflicts"] is False

    def test_format_with_indent(self, sample_result):
        """Respects indentation setting."""
        assert "    " in JSONFormatter(indent=4).format(sample_result)

    def test_format_compact(self, sample_result):
        """Compact format is a single line without separator padding."""
        compact = JSONFormatter().format_compact(sample_result)

        assert "\n" not in compact
        assert '"fitness":123.45' in compact

    def test_format_schedule_only(self, sample_result):
        """Schedule only format excludes everything but the entries."""
        data = json.loads(JSONFormatter().format_schedule_only(sample_result))

        assert isinstance(data, list)
        assert len(data) == 3
        assert "subjectCode" in data[0]

    def test_ensure_ascii(self, sample_result):
        """The ensure_ascii option applies to the full document."""
        entry = sample_result.schedule[0].model_copy(update={"staff_name": "Dr. Müller"})
        result = sample_result.model_copy(update={"schedule": [entry]})

        assert "Müller" in JSONFormatter().format(result)
        escaped = JSONFormatter(ensure_ascii=True).format(result)
        assert "Müller" not in escaped
        assert "M\\u00fcller" in escaped

    def test_format_json_function(self, sample_result):
        assert json.loads(format_json(sample_result)) == sample_result.to_dict()


class TestCSVFormatter:
    """Tests for CSVFormatter class."""

    def test_format_produces_valid_csv(self, sample_result):
        """Header row plus one row per entry."""
        rows = list(csv.reader(StringIO(CSVFormatter().format(sample_result))))

        assert len(rows) == 4
        assert rows[0] == CSVFormatter.DEFAULT_COLUMNS

    def test_rows_sorted_by_day_then_time(self, sample_result):
        rows = list(csv.reader(StringIO(CSVFormatter().format(sample_result))))
        assert [row[0] for row in rows[1:]] == ["e3", "e2", "e1"]

    def test_format_with_custom_columns(self, sample_result):
        """Respects custom columns."""
        columns = ["id", "day", "time"]
        rows = list(csv.reader(StringIO(CSVFormatter(columns=columns).format(sample_result))))

        assert rows[0] == columns
        assert rows[1] == ["e3", "Monday", "09:00-10:00"]

    def test_format_without_header(self, sample_result):
        """Can exclude header."""
        rows = list(csv.reader(StringIO(CSVFormatter(include_header=False).format(sample_result))))
        assert len(rows) == 3

    def test_custom_delimiter(self, sample_result):
        csv_str = CSVFormatter(delimiter=";").format(sample_result)
        assert csv_str.splitlines()[0].startswith("id;subject_code;")

    def test_minimal(self, sample_result):
        rows = list(csv.reader(StringIO(format_csv(sample_result, minimal=True))))
        assert rows[0] == CSVFormatter.MINIMAL_COLUMNS
        assert rows[1] == ["CS103", "Monday", "09:00-10:00", "Dr. Rao", "Room 101"]

    def test_empty_schedule(self):
        rows = list(csv.reader(StringIO(format_csv(ScheduleResult()))))
        assert len(rows) == 1


class TestConsoleFormatter:
    """Tests for ConsoleFormatter class."""

    def test_format_contains_summary(self, sample_result):
        text = ConsoleFormatter().format(sample_result)

        assert "COMPLETED" in text
        assert "Entries: 3" in text
        assert "Fitness: 123.45" in text
        assert "Utilization: 25.0%" in text
        assert "Weekly Schedule" in text

    def test_format_lists_conflicts(self, conflicted_result):
        text = format_console(conflicted_result)
        assert "Conflicts" in text
        assert "high" in text
        assert "staff" in text

    def test_fitness_components_shown(self, sample_result):
        result = sample_result.model_copy(update={
            "fitness_breakdown": {"staffPreference": 1.5, "penalty": 0.0, "total": 123.45},
        })
        text = format_console(result)

        assert "Fitness Components" in text
        assert "staffPreference" in text

    def test_no_fitness_table_without_breakdown(self, sample_result):
        assert "Fitness Components" not in format_console(sample_result)

    def test_no_conflict_table_when_clean(self, sample_result):
        assert "Description" not in format_console(sample_result)

    def test_print_to_given_console(self, sample_result):
        console = Console(record=True, width=120)
        ConsoleFormatter().print(sample_result, console)
        assert "Generated Timetable" in console.export_text()


class TestWeekGrid:
    """Tests for build_week_grid."""

    def test_columns_in_week_order(self, sample_schedule):
        table = build_week_grid(sample_schedule)
        assert [column.header for column in table.columns] == ["Time", "Mon", "Wed"]

    def test_one_row_per_time(self, sample_schedule):
        assert build_week_grid(sample_schedule).row_count == 2

    def test_clashing_entries_share_a_cell(self):
        schedule = [
            make_entry("e1", "CS101", "Monday", "09:00-10:00"),
            make_entry("e2", "CS102", "Monday", "09:00-10:00", staff_id="s2", staff_name="Dr. Nair"),
        ]
        console = Console(record=True, width=120)
        console.print(build_week_grid(schedule))
        text = console.export_text()

        assert "CS101" in text
        assert "CS102" in text

    def test_empty(self):
        table = build_week_grid([])
        assert table.row_count == 0
        assert len(table.columns) == 1


class TestConflictTable:
    """Tests for build_conflict_table."""

    def test_rows(self, conflicted_result):
        table = build_conflict_table(conflicted_result.conflicts, title="Found")
        assert table.title == "Found"
        assert table.row_count == 1


class TestStaffViewFormatter:
    """Tests for StaffViewFormatter class."""

    def test_format_staff_view(self, sample_result):
        text = StaffViewFormatter().format(sample_result, "s1")

        assert "Dr. Rao" in text
        assert "Subject CS101" in text
        assert "Subject CS103" in text
        assert "Subject CS102" not in text

    def test_unknown_staff(self, sample_result):
        assert format_staff_view(sample_result, "nobody") == "No schedule found for staff: nobody"


class TestViews:
    """Tests for create_views."""

    def test_groups_by_staff_and_classroom(self, sample_schedule):
        views = create_views(sample_schedule)

        assert set(views.by_staff) == {"s1", "s2"}
        assert [e.id for e in views.by_staff["s1"].entries] == ["e3", "e1"]
        assert views.by_classroom["r2"].name == "Lab 1"
        assert list(views.by_day) == ["Monday", "Wednesday"]


class TestFileOutput:
    """Tests for save_json and save_csv."""

    def test_save_json(self, sample_result, tmp_path):
        path = tmp_path / "timetable.json"
        save_json(sample_result, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["generationsRun"] == 10
        assert ScheduleResult.model_validate(data).schedule == sample_result.schedule

    def test_save_csv(self, sample_result, tmp_path):
        path = tmp_path / "timetable.csv"
        save_csv(sample_result, path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert len(rows) == 4
