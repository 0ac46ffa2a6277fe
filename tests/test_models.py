"""Tests for domain models and their boundary validation."""

from datetime import datetime

import pytest

from training_periodizer.exceptions import ErrorCode, InvalidProgramDefinitionError
from training_periodizer.models import (
    FatigueState,
    FatigueStatus,
    LoggedSet,
    Microcycle,
    PhaseTag,
    ProgramDefinition,
    ProgramWithSchedule,
    ProgressionShape,
    SetPrescription,
    SplitType,
    TrainingGoal,
    TrainingLevel,
)
from training_periodizer.models.schemas import ProgramDefinitionInput


BASE = {
    "goal": "strength",
    "level": "beginner",
    "split": "upper_lower",
    "duration_weeks": 6,
    "sessions_per_week": 4,
    "deload_cadence": 3,
    "progression": "linear",
}


class TestProgramDefinitionFromDict:
    """Tests for ProgramDefinition.from_dict."""

    def test_valid_definition(self):
        definition = ProgramDefinition.from_dict(BASE)

        assert definition.goal == TrainingGoal.STRENGTH
        assert definition.level == TrainingLevel.BEGINNER
        assert definition.split == SplitType.UPPER_LOWER
        assert definition.progression == ProgressionShape.LINEAR
        assert definition.duration_weeks == 6
        assert definition.include_techniques is True
        assert definition.program_id

    def test_enum_values_are_case_insensitive(self):
        definition = ProgramDefinition.from_dict({**BASE, "goal": " Strength "})
        assert definition.goal == TrainingGoal.STRENGTH

    def test_unknown_enum_value_is_rejected(self):
        with pytest.raises(InvalidProgramDefinitionError) as exc_info:
            ProgramDefinition.from_dict({**BASE, "goal": "yoga"})

        assert exc_info.value.code == ErrorCode.INVALID_PROGRAM_DEFINITION
        assert exc_info.value.details["field"] == "goal"
        assert exc_info.value.status_code == 400

    def test_missing_field_is_rejected(self):
        data = dict(BASE)
        del data["progression"]

        with pytest.raises(InvalidProgramDefinitionError) as exc_info:
            ProgramDefinition.from_dict(data)

        assert "progression" in exc_info.value.message

    @pytest.mark.parametrize("value", [True, 4.5, "4.5", None, [4]])
    def test_non_integer_counts_are_rejected(self, value):
        with pytest.raises(InvalidProgramDefinitionError):
            ProgramDefinition.from_dict({**BASE, "sessions_per_week": value})

    def test_integer_strings_are_accepted(self):
        definition = ProgramDefinition.from_dict({**BASE, "duration_weeks": "6"})
        assert definition.duration_weeks == 6

    def test_exercise_plan_must_be_a_mapping(self):
        with pytest.raises(InvalidProgramDefinitionError):
            ProgramDefinition.from_dict({**BASE, "exercise_plan": ["bench"]})

    def test_exercise_plan_lookup(self):
        definition = ProgramDefinition.from_dict({
            **BASE,
            "exercise_plan": {"upper": ["barbell-bench-press", "barbell-row"]},
        })

        assert definition.exercises_for("upper") == ("barbell-bench-press", "barbell-row")
        assert definition.exercises_for("lower") is None
        assert definition.to_dict()["exercise_plan"] == {
            "upper": ["barbell-bench-press", "barbell-row"],
        }

    def test_definition_is_immutable(self):
        definition = ProgramDefinition.from_dict(BASE)
        with pytest.raises(AttributeError):
            definition.duration_weeks = 10

    def test_schema_converts_to_definition(self):
        schema = ProgramDefinitionInput(**BASE)
        definition = schema.to_definition()

        assert definition.split == SplitType.UPPER_LOWER
        assert definition.user_id == "anonymous"


class TestScheduleModels:
    """Tests for schedule dataclasses."""

    def test_rep_range_formatting(self):
        assert SetPrescription(1, 8, 12, 2, 90).rep_range == "8-12"
        assert SetPrescription(1, 5, 5, 2, 90).rep_range == "5"

    def test_deload_weeks_include_overrides(self):
        definition = ProgramDefinition.from_dict(BASE)
        weeks = [
            Microcycle(week_index=i, phase=PhaseTag.ACCUMULATION, volume_multiplier=1.0,
                       intensity_multiplier=1.0, is_deload=(i == 3))
            for i in range(1, 7)
        ]
        program = ProgramWithSchedule(definition=definition, microcycles=weeks)
        program.deload_overrides.add(5)

        assert program.deload_weeks == [3, 5]
        assert program.week(1).week_index == 1
        assert program.week(7) is None
        assert program.to_dict()["deload_overrides"] == [5]


class TestLoggedSet:
    """Tests for LoggedSet effort conversion."""

    def test_rir_wins_over_rpe(self):
        assert LoggedSet("bench", 8, rir=1, rpe=7).effective_rir == 1.0

    def test_rir_from_rpe(self):
        assert LoggedSet("bench", 8, rpe=8).effective_rir == 2.0
        assert LoggedSet("bench", 8, rpe=10.5).effective_rir == 0.0

    def test_no_effort_logged(self):
        assert LoggedSet("bench", 8).effective_rir is None


class TestFatigueState:
    """Tests for FatigueState flags."""

    def test_key_and_flags(self):
        state = FatigueState("u", "p", "chest", status=FatigueStatus.HIGH,
                             updated_at=datetime(2026, 1, 5))

        assert state.key == "u:p:chest"
        assert state.at_risk is True
        assert state.deload_triggered is False
        assert state.to_dict()["status"] == "high"
