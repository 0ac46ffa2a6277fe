"""Tests for the periodization scheduler."""

import pytest

from training_periodizer.config import Settings
from training_periodizer.exceptions import InvalidProgramDefinitionError
from training_periodizer.models import DayType, DeloadReason, MuscleGroup, PhaseTag, SplitType
from training_periodizer.models.schedule import WeekMultipliers
from training_periodizer.services.prescription import PrescriptionRulesEngine
from training_periodizer.services.scheduler import (
    SPLIT_DEFINITIONS,
    PeriodizationScheduler,
    muscle_group_frequency,
    training_positions,
)
from tests.factories import make_definition


@pytest.fixture
def scheduler(settings):
    return PeriodizationScheduler(settings=settings)


def multipliers(weeks):
    return [(w.volume_multiplier, w.intensity_multiplier) for w in weeks]


class TestDeloadPlacement:
    """Tests for deload week placement."""

    @pytest.mark.parametrize("progression", ["linear", "wave", "step"])
    def test_cadence_four_over_twelve_weeks(self, scheduler, progression):
        weeks = scheduler.expand(make_definition(
            duration_weeks=12, deload_cadence=4, progression=progression,
        ))

        assert len(weeks) == 12
        assert [w.week_index for w in weeks if w.is_deload] == [4, 8, 12]
        for week in weeks:
            if week.is_deload:
                assert week.phase == PhaseTag.DELOAD
                assert week.deload_reason == DeloadReason.SCHEDULED
            else:
                assert week.deload_reason is None

    def test_no_cadence_means_no_deloads(self, scheduler):
        weeks = scheduler.expand(make_definition(duration_weeks=6, deload_cadence=0))
        assert not any(w.is_deload for w in weeks)

    def test_deload_multipliers_depend_on_level(self, scheduler):
        intermediate = scheduler.expand(make_definition(level="intermediate"))
        advanced = scheduler.expand(make_definition(level="advanced"))

        assert multipliers(intermediate)[3] == (0.6, 0.8)
        assert multipliers(advanced)[3] == (0.5, 0.8)


class TestProgressionShapes:
    """Tests for week multipliers under each progression shape."""

    def test_linear_values(self, scheduler):
        weeks = scheduler.expand(make_definition(progression="linear", deload_cadence=4))

        assert multipliers(weeks)[:5] == [
            (1.0, 1.0), (1.05, 1.025), (1.1, 1.05), (0.6, 0.8), (1.0, 1.0),
        ]

    def test_linear_intensity_is_monotone_without_deloads(self, scheduler):
        weeks = scheduler.expand(make_definition(
            progression="linear", deload_cadence=0, duration_weeks=20,
        ))
        intensities = [w.intensity_multiplier for w in weeks]

        assert intensities == sorted(intensities)

    def test_linear_is_monotone_within_blocks(self, scheduler):
        weeks = scheduler.expand(make_definition(
            progression="linear", deload_cadence=5, duration_weeks=15,
        ))
        for start in (0, 5, 10):
            block = [w.intensity_multiplier for w in weeks[start:start + 4]]
            assert block == sorted(block)

    def test_linear_is_capped(self, scheduler):
        weeks = scheduler.expand(make_definition(
            progression="linear", deload_cadence=0, duration_weeks=20,
        ))

        assert multipliers(weeks)[-1] == (1.3, 1.2)
        for volume, intensity in multipliers(weeks):
            assert volume <= 1.3
            assert intensity <= 1.2

    def test_wave_pattern(self, scheduler):
        weeks = scheduler.expand(make_definition(progression="wave", deload_cadence=4))

        assert multipliers(weeks) == [
            (1.0, 1.0), (1.1, 1.05), (1.2, 1.1), (0.6, 0.8),
            (1.0, 1.0), (1.1, 1.05), (1.2, 1.1), (0.6, 0.8),
        ]

    def test_wave_repeats_without_deloads(self, scheduler):
        weeks = scheduler.expand(make_definition(
            progression="wave", deload_cadence=0, duration_weeks=4,
        ))
        assert multipliers(weeks)[3] == (1.0, 1.0)

    def test_step_jumps_after_each_deload(self, scheduler):
        weeks = scheduler.expand(make_definition(
            progression="step", level="advanced", deload_cadence=4, duration_weeks=12,
        ))

        assert multipliers(weeks) == [
            (1.0, 1.0), (1.0, 1.0), (1.0, 1.0), (0.5, 0.8),
            (1.1, 1.05), (1.1, 1.05), (1.1, 1.05), (0.5, 0.8),
            (1.2, 1.1), (1.2, 1.1), (1.2, 1.1), (0.5, 0.8),
        ]


class TestPhases:
    """Tests for phase tagging."""

    def test_block_phases(self, scheduler):
        weeks = scheduler.expand(make_definition(progression="linear", deload_cadence=4))

        assert [w.phase for w in weeks[:4]] == [
            PhaseTag.ACCUMULATION,
            PhaseTag.ACCUMULATION,
            PhaseTag.INTENSIFICATION,
            PhaseTag.DELOAD,
        ]

    def test_trailing_partial_block_is_maintenance(self, scheduler):
        weeks = scheduler.expand(make_definition(deload_cadence=4, duration_weeks=10))

        assert weeks[8].phase == PhaseTag.MAINTENANCE
        assert weeks[9].phase == PhaseTag.MAINTENANCE

    def test_final_third_without_cadence(self, scheduler):
        weeks = scheduler.expand(make_definition(
            progression="linear", deload_cadence=0, duration_weeks=12,
        ))
        phases = [w.phase for w in weeks]

        assert phases[:8] == [PhaseTag.ACCUMULATION] * 8
        assert phases[8:] == [PhaseTag.INTENSIFICATION] * 4

    def test_wave_accumulates_over_first_cycle_only(self, scheduler):
        weeks = scheduler.expand(make_definition(
            progression="wave", deload_cadence=0, duration_weeks=7,
        ))

        assert [w.phase for w in weeks] == [
            PhaseTag.ACCUMULATION,
            PhaseTag.ACCUMULATION,
            PhaseTag.INTENSIFICATION,
            PhaseTag.MAINTENANCE,
            PhaseTag.MAINTENANCE,
            PhaseTag.INTENSIFICATION,
            PhaseTag.MAINTENANCE,
        ]


class TestAccumulationEffort:
    """Target RIR never rises across the accumulation weeks of a block."""

    @pytest.mark.parametrize("progression", ["linear", "wave", "step"])
    @pytest.mark.parametrize("cadence", [0, 2, 3, 4, 5, 6])
    def test_rir_non_increasing(self, scheduler, progression, cadence):
        engine = PrescriptionRulesEngine()
        weeks = scheduler.expand(make_definition(
            progression=progression, deload_cadence=cadence, duration_weeks=12,
        ))

        blocks = {}
        for week in weeks:
            if week.phase != PhaseTag.ACCUMULATION:
                continue
            block = (week.week_index - 1) // cadence if cadence else 0
            blocks.setdefault(block, []).append(week)

        for block_weeks in blocks.values():
            for day_type in (DayType.STRENGTH, DayType.HYPERTROPHY, DayType.ENDURANCE, DayType.POWER):
                rirs = [
                    engine.prescribe(
                        day_type,
                        False,
                        WeekMultipliers(w.volume_multiplier, w.intensity_multiplier),
                    )[0].target_rir
                    for w in block_weeks
                ]
                assert rirs == sorted(rirs, reverse=True), (progression, cadence, day_type, rirs)


class TestDays:
    """Tests for the weekly day skeleton."""

    def test_training_positions(self):
        assert training_positions(4) == [1, 2, 4, 6]
        assert training_positions(3) == [1, 3, 5]
        assert training_positions(1) == [1]

    def test_every_week_has_seven_days(self, scheduler):
        for week in scheduler.expand(make_definition()):
            assert [d.position for d in week.days] == list(range(1, 8))
            assert len(week.training_days) == 4

    def test_rest_days_are_empty(self, scheduler):
        week = scheduler.expand(make_definition())[0]
        rest = [d for d in week.days if d.is_rest_day]

        assert [d.position for d in rest] == [3, 5, 7]
        for day in rest:
            assert day.day_type == DayType.REST
            assert day.slots == ()
            assert day.muscle_groups == ()

    def test_goal_day_types_rotate(self, scheduler):
        week = scheduler.expand(make_definition(goal="strength"))[0]

        assert [d.day_type for d in week.training_days] == [
            DayType.STRENGTH, DayType.HYPERTROPHY, DayType.STRENGTH, DayType.HYPERTROPHY,
        ]

    def test_split_sessions_rotate(self, scheduler):
        week = scheduler.expand(make_definition(split="upper_lower"))[0]
        assert [d.session_label for d in week.training_days] == ["upper", "lower", "upper", "lower"]

    @pytest.mark.parametrize("split", list(SplitType))
    def test_every_split_covers_every_muscle_group(self, scheduler, split):
        sessions = len(SPLIT_DEFINITIONS[split])
        week = scheduler.expand(make_definition(split=split.value, sessions_per_week=sessions))[0]
        frequency = muscle_group_frequency(week)

        assert set(frequency) == set(MuscleGroup)
        assert all(count >= 1 for count in frequency.values())


class TestValidation:
    """Tests for rejected definitions."""

    @pytest.mark.parametrize("overrides,field", [
        ({"sessions_per_week": 7}, "sessions_per_week"),
        ({"split": "upper_lower", "sessions_per_week": 1}, "sessions_per_week"),
        ({"split": "body_part", "sessions_per_week": 4}, "sessions_per_week"),
        ({"duration_weeks": 3, "deload_cadence": 4}, "duration_weeks"),
        ({"duration_weeks": 0}, "duration_weeks"),
        ({"duration_weeks": 53}, "duration_weeks"),
        ({"deload_cadence": -1}, "deload_cadence"),
        ({"sessions_per_week": 0}, "sessions_per_week"),
    ])
    def test_rejected(self, scheduler, overrides, field):
        with pytest.raises(InvalidProgramDefinitionError) as exc_info:
            scheduler.expand(make_definition(**overrides))

        assert exc_info.value.details["field"] == field

    def test_rest_day_limit_comes_from_settings(self):
        scheduler = PeriodizationScheduler(settings=Settings(_env_file=None, min_rest_days=2))

        with pytest.raises(InvalidProgramDefinitionError):
            scheduler.expand(make_definition(sessions_per_week=6))

    def test_body_part_with_five_sessions(self, scheduler):
        weeks = scheduler.expand(make_definition(split="body_part", sessions_per_week=5))
        assert len(weeks[0].training_days) == 5


class TestDeterminism:
    """Expansion is a pure function of its input."""

    def test_same_definition_same_schedule(self, scheduler):
        definition = make_definition(duration_weeks=12, progression="step")
        assert scheduler.expand(definition) == scheduler.expand(definition)
