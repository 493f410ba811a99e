"""Tests for CLI module."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from timetabler.cli import app
from timetabler.data.generator import GeneratorConfig, generate_sample_dataset, save_generated_dataset
from timetabler.data.loader import load_dataset, load_timetable_entries


runner = CliRunner()


@pytest.fixture
def dataset_file(tmp_path) -> Path:
    """A generated dataset that passes validation."""
    filepath = tmp_path / "dataset.json"
    save_generated_dataset(generate_sample_dataset(GeneratorConfig(seed=42)), filepath)
    return filepath


@pytest.fixture
def understaffed_file(tmp_path) -> Path:
    """A dataset with a single teacher, below the CSE minimum."""
    dataset = generate_sample_dataset(GeneratorConfig(seed=42))
    data = dataset.model_dump(by_alias=True, exclude_none=True, mode="json")
    data["staff"] = data["staff"][:1]
    data["staff"][0]["subjects"] = []

    filepath = tmp_path / "understaffed.json"
    filepath.write_text(json.dumps(data), encoding="utf-8")
    return filepath


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_dataset(self, dataset_file):
        result = runner.invoke(app, ["validate", str(dataset_file)])

        assert result.exit_code == 0
        assert "Validation passed." in result.stdout
        assert "No conflicts found" in result.stdout

    def test_invalid_dataset(self, understaffed_file):
        result = runner.invoke(app, ["validate", str(understaffed_file)])

        assert result.exit_code == 1
        assert "Validation failed." in result.stdout
        assert "Recommendations" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_malformed_json(self, tmp_path):
        filepath = tmp_path / "broken.json"
        filepath.write_text("{not json", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(filepath)])

        assert result.exit_code == 1
        assert "Error loading input" in result.stdout

    def test_missing_department(self, tmp_path):
        filepath = tmp_path / "nodept.json"
        filepath.write_text(json.dumps({"subjects": []}), encoding="utf-8")

        result = runner.invoke(app, ["validate", str(filepath)])
        assert result.exit_code == 1

    def test_non_utf8_file(self, tmp_path):
        filepath = tmp_path / "binary.json"
        filepath.write_bytes(b"\xff\xfe")

        result = runner.invoke(app, ["validate", str(filepath)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error loading input" in result.stdout

    def test_requirements_override(self, dataset_file, tmp_path):
        """A stricter requirements file turns a valid dataset invalid."""
        requirements = tmp_path / "requirements.json"
        requirements.write_text(json.dumps({"CSE": {"minStaff": 20}}), encoding="utf-8")

        result = runner.invoke(app, ["validate", str(dataset_file), "--requirements", str(requirements)])
        assert result.exit_code == 1

    def test_malformed_requirements(self, dataset_file, tmp_path):
        requirements = tmp_path / "requirements.json"
        requirements.write_text(json.dumps(["CSE"]), encoding="utf-8")

        result = runner.invoke(app, ["validate", str(dataset_file), "-r", str(requirements)])

        assert result.exit_code == 1
        assert "Error loading requirements" in result.stdout


class TestGenerateCommand:
    """Tests for the generate command."""

    def test_generate_json(self, dataset_file, tmp_path):
        output = tmp_path / "out" / "timetable.json"
        result = runner.invoke(app, [
            "generate", str(dataset_file),
            "-o", str(output), "--seed", "1", "-g", "3", "-p", "6",
        ])

        assert result.exit_code == 0
        assert "Weekly Schedule" in result.stdout
        assert output.exists()

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["status"] == "completed"
        assert data["generationsRun"] == 3
        assert len(data["schedule"]) == 12

    def test_generate_csv(self, dataset_file, tmp_path):
        output = tmp_path / "timetable.csv"
        result = runner.invoke(app, [
            "generate", str(dataset_file),
            "-o", str(output), "--format", "csv", "-s", "1", "-g", "2", "-p", "4",
        ])

        assert result.exit_code == 0
        with open(output, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "id"
        assert len(rows) == 13

    def test_generate_without_output(self, dataset_file):
        result = runner.invoke(app, ["generate", str(dataset_file), "-g", "1", "-p", "4"])
        assert result.exit_code == 0

    def test_validation_blocks_generation(self, understaffed_file):
        result = runner.invoke(app, ["generate", str(understaffed_file), "-g", "1", "-p", "4"])

        assert result.exit_code == 1
        assert "--skip-validation" in result.stdout

    def test_skip_validation(self, understaffed_file, tmp_path):
        output = tmp_path / "timetable.json"
        result = runner.invoke(app, [
            "generate", str(understaffed_file), "--skip-validation",
            "-o", str(output), "-g", "1", "-p", "4",
        ])

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["hasHardConflicts"] is True

    def test_duplicate_staff_ids(self, tmp_path):
        """Repeated staff IDs are reported as an input error, not a crash."""
        data = generate_sample_dataset(GeneratorConfig(seed=42)).model_dump(by_alias=True, exclude_none=True, mode="json")
        data["staff"].append(data["staff"][0])
        filepath = tmp_path / "duplicated.json"
        filepath.write_text(json.dumps(data), encoding="utf-8")

        result = runner.invoke(app, ["generate", str(filepath), "--skip-validation", "-g", "1", "-p", "4"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Duplicate staff ID" in result.stdout

    def test_population_below_minimum(self, dataset_file):
        result = runner.invoke(app, ["generate", str(dataset_file), "-p", "1"])
        assert result.exit_code != 0

    def test_invalid_timeout(self, dataset_file):
        result = runner.invoke(app, ["generate", str(dataset_file), "-g", "1", "-p", "4", "-t", "0"])

        assert result.exit_code == 1
        assert "Invalid settings" in result.stdout


class TestCrossCheckCommand:
    """Tests for the cross-check command."""

    @pytest.fixture
    def timetable_file(self, dataset_file, tmp_path) -> Path:
        output = tmp_path / "timetable.json"
        runner.invoke(app, ["generate", str(dataset_file), "-o", str(output), "-s", "3", "-g", "2", "-p", "4"])
        return output

    def test_cross_check_generated_timetable(self, dataset_file, timetable_file):
        result = runner.invoke(app, ["cross-check", str(dataset_file), "--timetable", str(timetable_file)])

        assert result.exit_code == 0
        assert "Cross-Department Check" in result.stdout
        assert "12 proposed entries for CSE" in result.stdout

    def test_existing_timetable(self, dataset_file, timetable_file, tmp_path):
        existing = tmp_path / "existing.json"
        entries = [e.model_dump(by_alias=True) for e in load_timetable_entries(timetable_file)]
        for entry in entries:
            entry["department"] = "ECE"
        existing.write_text(json.dumps(entries), encoding="utf-8")

        result = runner.invoke(app, [
            "cross-check", str(dataset_file), "-t", str(timetable_file), "-e", str(existing),
        ])

        # Cross-department findings are advisory
        assert result.exit_code == 0
        assert "Cross-Department Conflicts" in result.stdout

    def test_missing_timetable(self, dataset_file, tmp_path):
        result = runner.invoke(app, ["cross-check", str(dataset_file), "-t", str(tmp_path / "none.json")])

        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestSampleCommand:
    """Tests for the sample command."""

    def test_sample_to_file(self, tmp_path):
        output = tmp_path / "sample.json"
        result = runner.invoke(app, ["sample", "-o", str(output), "--seed", "5"])

        assert result.exit_code == 0
        assert load_dataset(output) == generate_sample_dataset(GeneratorConfig(seed=5))

    def test_sample_to_stdout(self):
        result = runner.invoke(app, ["sample", "--department", "ECE", "--seed", "1"])

        assert result.exit_code == 0
        assert '"department": "ECE"' in result.stdout

    def test_sample_with_preferences(self, tmp_path):
        output = tmp_path / "sample.json"
        runner.invoke(app, ["sample", "-o", str(output), "--preferences"])

        assert load_dataset(output).preferences.prefer_morning


class TestHelp:
    """Tests for command help output."""

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("validate", "generate", "cross-check", "sample"):
            assert command in result.stdout
