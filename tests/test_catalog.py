"""Tests for the exercise catalog adapter."""

import pytest

from training_periodizer.catalog import (
    ExerciseCatalogAdapter,
    InMemoryExerciseLookup,
    normalize_exercise,
    normalize_muscles,
)
from training_periodizer.exceptions import ErrorCode, UnknownExerciseReferenceError
from training_periodizer.models import ExerciseCategory, LoggedSet, MuscleGroup


@pytest.fixture
def adapter():
    return ExerciseCatalogAdapter()


def ids(exercises):
    return [e.exercise_id for e in exercises]


class TestNormalization:
    """Tests for normalizing raw exercise records."""

    def test_muscle_aliases(self):
        assert normalize_muscles(["front_delts", "lats", "Quads", "abs"]) == (
            MuscleGroup.SHOULDERS,
            MuscleGroup.BACK,
            MuscleGroup.QUADRICEPS,
            MuscleGroup.CORE,
        )

    def test_aliases_collapse_duplicates(self):
        assert normalize_muscles(["upper_back", "lats"]) == (MuscleGroup.BACK,)

    def test_unknown_muscles_are_dropped(self):
        assert normalize_muscles(["forearms", "chest"]) == (MuscleGroup.CHEST,)

    def test_camel_case_record(self):
        info = normalize_exercise({
            "id": "barbell-bench-press",
            "name": "Barbell Bench Press",
            "primaryMuscles": ["chest"],
            "secondaryMuscles": ["triceps", "front_delts"],
            "equipment": ["barbell"],
            "isCompound": True,
        })

        assert info.primary_muscles == (MuscleGroup.CHEST,)
        assert info.secondary_muscles == (MuscleGroup.TRICEPS, MuscleGroup.SHOULDERS)
        assert info.categories == frozenset({ExerciseCategory.COMPOUND, ExerciseCategory.FREE_WEIGHTS})
        assert info.primary_category == ExerciseCategory.COMPOUND

    def test_snake_case_record(self):
        info = normalize_exercise({
            "exercise_id": "cable-curl",
            "name": "Cable Curl",
            "primary_muscles": ["biceps"],
            "equipment": ["cable"],
            "is_compound": False,
        })

        assert info.exercise_id == "cable-curl"
        assert info.categories == frozenset({ExerciseCategory.ISOLATION, ExerciseCategory.CABLE})

    def test_secondary_excludes_primary(self):
        info = normalize_exercise({
            "id": "x", "primaryMuscles": ["quads"], "secondaryMuscles": ["quadriceps", "glutes"],
        })
        assert info.secondary_muscles == (MuscleGroup.GLUTES,)


class TestResolve:
    """Tests for exercise lookup."""

    def test_resolve_known(self, adapter):
        info = adapter.resolve("back-squat")

        assert info.name == "Back Squat"
        assert info.is_compound
        assert info.primary_muscles == (MuscleGroup.QUADRICEPS, MuscleGroup.GLUTES)

    def test_resolve_unknown(self, adapter):
        with pytest.raises(UnknownExerciseReferenceError) as exc_info:
            adapter.resolve("no-such-move")

        assert exc_info.value.exercise_id == "no-such-move"
        assert exc_info.value.code == ErrorCode.UNKNOWN_EXERCISE_REFERENCE
        assert exc_info.value.status_code == 404

    def test_list_all_is_sorted(self, adapter):
        listed = ids(adapter.list_all())
        assert listed == sorted(listed)
        assert len(listed) == 24


class TestSelection:
    """Tests for selecting exercises by muscle group."""

    def test_upper_body(self, adapter):
        selected = adapter.select_for_muscle_groups([
            MuscleGroup.CHEST, MuscleGroup.BACK, MuscleGroup.SHOULDERS,
            MuscleGroup.BICEPS, MuscleGroup.TRICEPS,
        ])

        assert ids(selected) == [
            "barbell-bench-press",
            "barbell-row",
            "dumbbell-shoulder-press",
            "barbell-curl",
            "close-grip-bench-press",
        ]

    def test_covered_groups_are_not_picked_twice(self, adapter):
        selected = adapter.select_for_muscle_groups([
            MuscleGroup.QUADRICEPS, MuscleGroup.HAMSTRINGS, MuscleGroup.GLUTES,
            MuscleGroup.CALVES, MuscleGroup.CORE,
        ])

        # Back squat covers glutes
        assert ids(selected) == [
            "back-squat",
            "romanian-deadlift",
            "standing-calf-raise",
            "cable-crunch",
        ]

    def test_max_exercises(self, adapter):
        selected = adapter.select_for_muscle_groups(list(MuscleGroup), max_exercises=2)
        assert ids(selected) == ["barbell-bench-press", "barbell-row"]

    def test_missing_group_is_skipped(self):
        adapter = ExerciseCatalogAdapter(InMemoryExerciseLookup([
            {"id": "curl", "primaryMuscles": ["biceps"]},
        ]))

        assert ids(adapter.select_for_muscle_groups([MuscleGroup.CHEST, MuscleGroup.BICEPS])) == ["curl"]


class TestAlternatives:
    """Tests for exercise alternatives."""

    def test_declared_alternatives(self, adapter):
        assert ids(adapter.alternatives("barbell-bench-press")) == [
            "dumbbell-bench-press",
            "machine-chest-press",
        ]

    def test_fallback_to_movement_pattern(self):
        adapter = ExerciseCatalogAdapter(InMemoryExerciseLookup([
            {"id": "a", "primaryMuscles": ["chest"], "movementPattern": "horizontal_push"},
            {"id": "b", "primaryMuscles": ["chest"], "movementPattern": "horizontal_push"},
            {"id": "c", "primaryMuscles": ["chest"], "movementPattern": "isolation"},
        ]))

        assert ids(adapter.alternatives("a")) == ["b"]

    def test_unresolvable_declared_alternative_is_skipped(self):
        adapter = ExerciseCatalogAdapter(InMemoryExerciseLookup([
            {"id": "a", "primaryMuscles": ["chest"], "alternatives": ["gone", "b"]},
            {"id": "b", "primaryMuscles": ["chest"]},
        ]))

        assert ids(adapter.alternatives("a")) == ["b"]


class TestAggregateSessionLogs:
    """Tests for collapsing logged sets into per-group load."""

    def test_counts_and_average_rir(self, adapter):
        logs = [
            LoggedSet("barbell-bench-press", 10, rir=4, is_warmup=True),
            LoggedSet("barbell-bench-press", 8, rir=1),
            LoggedSet("barbell-bench-press", 8, rir=2),
            LoggedSet("barbell-bench-press", 7, rir=3),
            LoggedSet("back-squat", 5, rpe=8),
            LoggedSet("back-squat", 5, rpe=8),
        ]

        load = adapter.aggregate_session_logs(logs)

        assert load.set_counts == {"chest": 3, "quadriceps": 2, "glutes": 2}
        assert load.average_rir == {"chest": 2.0, "quadriceps": 2.0, "glutes": 2.0}

    def test_sets_without_effort_count_but_do_not_average(self, adapter):
        load = adapter.aggregate_session_logs([
            LoggedSet("cable-curl", 12),
            LoggedSet("cable-curl", 12, rir=3),
        ])

        assert load.set_counts == {"biceps": 2}
        assert load.average_rir == {"biceps": 3.0}

    def test_unknown_exercise_raises(self, adapter):
        with pytest.raises(UnknownExerciseReferenceError):
            adapter.aggregate_session_logs([LoggedSet("no-such-move", 10, rir=2)])
