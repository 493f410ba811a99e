"""Tests for sample data generator."""

from __future__ import annotations

import pytest

from timetabler.data.generator import (
    DEPARTMENT_SUBJECTS,
    PERIOD_TIMES,
    GeneratorConfig,
    generate_sample_dataset,
    get_generation_stats,
    save_generated_dataset,
)
from timetabler.data.loader import load_dataset
from timetabler.data.models import DepartmentDataset, RoomType, SubjectType
from timetabler.validation.feasibility import validate_pre_scheduling_requirements


class TestGeneratorConfig:
    """Tests for GeneratorConfig."""

    def test_default_config(self):
        """Default config has expected values."""
        config = GeneratorConfig()

        assert config.department == "CSE"
        assert config.num_staff == 6
        assert config.num_lecture_rooms == 2
        assert config.num_lab_rooms == 2
        assert config.lab_duration == 2

    def test_seed_makes_reproducible(self):
        """Same seed produces same data."""
        first = generate_sample_dataset(GeneratorConfig(seed=42))
        second = generate_sample_dataset(GeneratorConfig(seed=42))

        assert first == second


class TestGenerateSampleDataset:
    """Tests for generate_sample_dataset function."""

    def test_generates_dataset(self):
        dataset = generate_sample_dataset(GeneratorConfig(seed=42))

        assert isinstance(dataset, DepartmentDataset)
        assert dataset.department == "CSE"
        assert dataset.year == "2"
        assert dataset.semester == "3"

    def test_default_config_is_used(self):
        dataset = generate_sample_dataset()
        assert len(dataset.staff) == 6

    @pytest.mark.parametrize("department", sorted(DEPARTMENT_SUBJECTS))
    def test_catalogue_subjects(self, department):
        dataset = generate_sample_dataset(GeneratorConfig(department=department, seed=1))
        assert [s.code for s in dataset.subjects] == [code for code, _, _ in DEPARTMENT_SUBJECTS[department]]

    def test_lab_subjects_use_lab_duration(self):
        dataset = generate_sample_dataset(GeneratorConfig(seed=1, lab_duration=3, lab_hours_per_week=6))
        labs = [s for s in dataset.subjects if s.type == SubjectType.LAB]

        assert labs
        assert all(s.duration == 3 and s.sessions_per_week == 2 for s in labs)

    def test_every_subject_has_qualified_staff(self):
        for seed in range(10):
            dataset = generate_sample_dataset(GeneratorConfig(seed=seed))
            taught = {code for member in dataset.staff for code in member.subjects}
            assert taught == {s.code for s in dataset.subjects}

    def test_staff_ids_unique(self):
        dataset = generate_sample_dataset(GeneratorConfig(seed=3, num_staff=12))
        ids = [s.id for s in dataset.staff]

        assert len(ids) == len(set(ids))
        assert ids[0] == "cse-s1"

    def test_staff_not_overloaded(self):
        dataset = generate_sample_dataset(GeneratorConfig(seed=5))
        assert not any(member.is_overloaded for member in dataset.staff)

    def test_classrooms(self):
        dataset = generate_sample_dataset(GeneratorConfig(seed=1, num_lecture_rooms=3, num_lab_rooms=1))

        assert [c.type for c in dataset.classrooms] == [RoomType.LECTURE] * 3 + [RoomType.LAB]
        assert dataset.classrooms[0].id == "cse-lh1"
        assert dataset.classrooms[-1].id == "cse-lab1"

    def test_group_strength_in_range(self):
        dataset = generate_sample_dataset(GeneratorConfig(seed=2, num_groups=3))

        assert len(dataset.student_groups) == 3
        assert all(30 <= g.strength <= 40 for g in dataset.student_groups)

    def test_slots(self):
        dataset = generate_sample_dataset(GeneratorConfig(num_days=3, periods_per_day=4))

        assert len(dataset.available_slots) == 12
        assert dataset.available_slots[0].day == "Monday"
        assert [s.time for s in dataset.available_slots[:4]] == PERIOD_TIMES[:4]

    def test_preferences(self):
        assert generate_sample_dataset(GeneratorConfig(seed=1)).preferences is None

        dataset = generate_sample_dataset(GeneratorConfig(seed=1, with_preferences=True))
        assert dataset.preferences.prefer_morning
        assert dataset.preferences.avoid_lunch_slot

    def test_unknown_department_gets_placeholder_subjects(self):
        dataset = generate_sample_dataset(GeneratorConfig(department="CIVIL", seed=1))
        assert [s.code for s in dataset.subjects] == ["CI101", "CI102"]

    @pytest.mark.parametrize("department", sorted(DEPARTMENT_SUBJECTS))
    def test_default_dataset_passes_validation(self, department):
        """Generated datasets satisfy the built-in department requirements."""
        dataset = generate_sample_dataset(GeneratorConfig(department=department, seed=11))
        result = validate_pre_scheduling_requirements(
            dataset.subjects,
            dataset.staff,
            dataset.classrooms,
            dataset.student_groups,
            dataset.department,
            dataset.year,
            dataset.semester,
        )

        assert result.is_valid
        assert result.conflicts == []


class TestSaveGeneratedDataset:
    """Tests for save_generated_dataset."""

    def test_round_trip_through_loader(self, tmp_path):
        dataset = generate_sample_dataset(GeneratorConfig(seed=8, with_preferences=True))
        path = tmp_path / "dataset.json"

        save_generated_dataset(dataset, path)

        assert '"hoursPerWeek"' in path.read_text(encoding="utf-8")
        assert load_dataset(path) == dataset


class TestGenerationStats:
    """Tests for get_generation_stats."""

    def test_counts(self):
        stats = get_generation_stats(generate_sample_dataset(GeneratorConfig(seed=1)))

        assert stats["department"] == "CSE"
        assert stats["subjects"] == 4
        assert stats["classrooms"] == 4
        assert stats["available_slots"] == 30
        assert stats["total_sessions"] == 12
        assert stats["total_periods"] == 16
        assert stats["utilization_percent"] == pytest.approx(13.3)
