"""
Periodization scheduler.

Expands a ProgramDefinition into an ordered list of Microcycles, each with
its phase tag, deload flag, volume/intensity multipliers and a 7-day
skeleton of training and rest days. Exercise slots are filled later by
ProgramService.
"""

from typing import Dict, List, Tuple
import math

from ..exceptions import InvalidProgramDefinitionError
from ..models.exercise import MuscleGroup
from ..models.program import ProgramDefinition, ProgressionShape, SplitType, TrainingGoal, TrainingLevel
from ..models.schedule import (
    DayType,
    DeloadReason,
    Microcycle,
    PhaseTag,
    TrainingDay,
    WeekMultipliers,
)
from ..utils import round_to
from .base import BaseService


DAYS_PER_WEEK = 7

MAX_VOLUME_MULTIPLIER = 1.3
MAX_INTENSITY_MULTIPLIER = 1.2

DELOAD_INTENSITY = 0.8
DELOAD_VOLUME: Dict[TrainingLevel, float] = {
    TrainingLevel.BEGINNER: 0.6,
    TrainingLevel.INTERMEDIATE: 0.6,
    TrainingLevel.ADVANCED: 0.5,
    TrainingLevel.ELITE: 0.5,
}

# Per non-deload week inside a block
LINEAR_VOLUME_STEP = 0.05
LINEAR_INTENSITY_STEP = 0.025

# Moderate -> high -> very high
WAVE_PATTERN: Tuple[Tuple[float, float], ...] = (
    (1.0, 1.0),
    (1.1, 1.05),
    (1.2, 1.1),
)

# Per completed deload
STEP_VOLUME_JUMP = 0.1
STEP_INTENSITY_JUMP = 0.05


SplitSession = Tuple[str, Tuple[MuscleGroup, ...]]

_UPPER = (MuscleGroup.CHEST, MuscleGroup.BACK, MuscleGroup.SHOULDERS,
          MuscleGroup.BICEPS, MuscleGroup.TRICEPS)
_LOWER = (MuscleGroup.QUADRICEPS, MuscleGroup.HAMSTRINGS, MuscleGroup.GLUTES,
          MuscleGroup.CALVES, MuscleGroup.CORE)

SPLIT_DEFINITIONS: Dict[SplitType, Tuple[SplitSession, ...]] = {
    SplitType.FULL_BODY: (
        ("full_body", _UPPER + _LOWER),
    ),
    SplitType.UPPER_LOWER: (
        ("upper", _UPPER),
        ("lower", _LOWER),
    ),
    SplitType.PUSH_PULL_LEGS: (
        ("push", (MuscleGroup.CHEST, MuscleGroup.SHOULDERS, MuscleGroup.TRICEPS)),
        ("pull", (MuscleGroup.BACK, MuscleGroup.BICEPS)),
        ("legs", _LOWER),
    ),
    SplitType.PUSH_PULL: (
        ("push", (MuscleGroup.CHEST, MuscleGroup.SHOULDERS, MuscleGroup.TRICEPS,
                  MuscleGroup.QUADRICEPS, MuscleGroup.CALVES)),
        ("pull", (MuscleGroup.BACK, MuscleGroup.BICEPS, MuscleGroup.HAMSTRINGS,
                  MuscleGroup.GLUTES, MuscleGroup.CORE)),
    ),
    SplitType.BODY_PART: (
        ("chest", (MuscleGroup.CHEST,)),
        ("back", (MuscleGroup.BACK,)),
        ("shoulders", (MuscleGroup.SHOULDERS, MuscleGroup.CORE)),
        ("legs", (MuscleGroup.QUADRICEPS, MuscleGroup.HAMSTRINGS,
                  MuscleGroup.GLUTES, MuscleGroup.CALVES)),
        ("arms", (MuscleGroup.BICEPS, MuscleGroup.TRICEPS)),
    ),
}

GOAL_DAY_TYPES: Dict[TrainingGoal, Tuple[DayType, ...]] = {
    TrainingGoal.STRENGTH: (DayType.STRENGTH, DayType.HYPERTROPHY),
    TrainingGoal.HYPERTROPHY: (DayType.HYPERTROPHY,),
    TrainingGoal.ENDURANCE: (DayType.ENDURANCE,),
    TrainingGoal.POWER: (DayType.POWER, DayType.STRENGTH),
    TrainingGoal.WEIGHT_LOSS: (DayType.HYPERTROPHY, DayType.ENDURANCE),
    TrainingGoal.GENERAL_FITNESS: (DayType.HYPERTROPHY, DayType.STRENGTH, DayType.ENDURANCE),
}


def deload_multipliers(level: TrainingLevel) -> WeekMultipliers:
    """Multipliers applied to any deload week, scheduled or forced."""
    return WeekMultipliers(volume=DELOAD_VOLUME[level], intensity=DELOAD_INTENSITY)


def is_scheduled_deload(week_index: int, cadence: int) -> bool:
    return cadence > 0 and week_index % cadence == 0


def training_positions(sessions_per_week: int) -> List[int]:
    """Spread training days across the week: positions 1-7, first day always trains."""
    return [(i * DAYS_PER_WEEK) // sessions_per_week + 1 for i in range(sessions_per_week)]


def muscle_group_frequency(microcycle: Microcycle) -> Dict[MuscleGroup, int]:
    """How many training days of the week hit each muscle group."""
    frequency: Dict[MuscleGroup, int] = {}
    for day in microcycle.training_days:
        for group in day.muscle_groups:
            frequency[group] = frequency.get(group, 0) + 1
    return frequency


class PeriodizationScheduler(BaseService):
    """Builds the week/day skeleton of a program."""

    def validate(self, program: ProgramDefinition) -> None:
        """
        Check structural limits of a program definition.

        Raises:
            InvalidProgramDefinitionError: on any violated limit
        """
        max_weeks = self.settings.max_duration_weeks
        max_sessions = DAYS_PER_WEEK - self.settings.min_rest_days
        rotation = SPLIT_DEFINITIONS[program.split]

        if program.duration_weeks < 1 or program.duration_weeks > max_weeks:
            raise InvalidProgramDefinitionError(
                f"duration_weeks must be between 1 and {max_weeks}, got {program.duration_weeks}",
                field="duration_weeks",
            )
        if program.sessions_per_week < 1:
            raise InvalidProgramDefinitionError(
                "sessions_per_week must be at least 1",
                field="sessions_per_week",
            )
        if program.sessions_per_week > max_sessions:
            raise InvalidProgramDefinitionError(
                f"sessions_per_week ({program.sessions_per_week}) exceeds {max_sessions} "
                f"({self.settings.min_rest_days} mandatory rest day(s) per week)",
                field="sessions_per_week",
                details={"max_sessions_per_week": max_sessions},
            )
        if program.sessions_per_week < len(rotation):
            raise InvalidProgramDefinitionError(
                f"{program.split.value} split needs at least {len(rotation)} sessions per week "
                f"to train every muscle group, got {program.sessions_per_week}",
                field="sessions_per_week",
                details={"min_sessions_per_week": len(rotation)},
            )
        if program.deload_cadence < 0:
            raise InvalidProgramDefinitionError(
                "deload_cadence cannot be negative",
                field="deload_cadence",
            )
        if program.deload_cadence > 0 and program.duration_weeks < program.deload_cadence:
            raise InvalidProgramDefinitionError(
                f"duration_weeks ({program.duration_weeks}) is shorter than one deload "
                f"cadence ({program.deload_cadence})",
                field="duration_weeks",
            )

    def expand(self, program: ProgramDefinition) -> List[Microcycle]:
        """
        Expand a program into its microcycles.

        Validation runs first, so a rejected program never yields a
        partial schedule.

        Raises:
            InvalidProgramDefinitionError: if the definition violates a limit
        """
        self.validate(program)

        microcycles = []
        for week_index in range(1, program.duration_weeks + 1):
            deload = is_scheduled_deload(week_index, program.deload_cadence)
            multipliers = self.week_multipliers(program, week_index)
            microcycles.append(
                Microcycle(
                    week_index=week_index,
                    phase=self.phase_for(program, week_index),
                    volume_multiplier=multipliers.volume,
                    intensity_multiplier=multipliers.intensity,
                    is_deload=deload,
                    days=self.build_days(program),
                    deload_reason=DeloadReason.SCHEDULED if deload else None,
                )
            )

        self.logger.debug(
            "Expanded program %s into %d weeks (deloads: %s)",
            program.program_id,
            len(microcycles),
            [m.week_index for m in microcycles if m.is_deload],
        )
        return microcycles

    def week_multipliers(self, program: ProgramDefinition, week_index: int) -> WeekMultipliers:
        """Volume/intensity multipliers for one week under the program's progression shape."""
        cadence = program.deload_cadence
        if is_scheduled_deload(week_index, cadence):
            return deload_multipliers(program.level)

        if program.progression == ProgressionShape.LINEAR:
            k = self._position_in_block(week_index, cadence)
            volume = 1.0 + LINEAR_VOLUME_STEP * k
            intensity = 1.0 + LINEAR_INTENSITY_STEP * k
        elif program.progression == ProgressionShape.WAVE:
            k = self._position_in_block(week_index, cadence)
            volume, intensity = WAVE_PATTERN[k % len(WAVE_PATTERN)]
        else:
            completed = (week_index - 1) // cadence if cadence > 0 else 0
            volume = 1.0 + STEP_VOLUME_JUMP * completed
            intensity = 1.0 + STEP_INTENSITY_JUMP * completed

        return WeekMultipliers(
            volume=round_to(min(volume, MAX_VOLUME_MULTIPLIER), 3),
            intensity=round_to(min(intensity, MAX_INTENSITY_MULTIPLIER), 3),
        )

    def phase_for(self, program: ProgramDefinition, week_index: int) -> PhaseTag:
        """
        Phase tag of a week.

        Deload weeks are tagged deload. A trailing block too short to hold a
        full cycle of training weeks is maintenance. Wave blocks accumulate
        over their first cycle only; every very-high week is intensification
        and the repeated cycles after it are maintenance. Other shapes tag
        the final third of a block's training weeks intensification and the
        rest accumulation.
        """
        cadence = program.deload_cadence
        if is_scheduled_deload(week_index, cadence):
            return PhaseTag.DELOAD

        if cadence > 0:
            block_start = ((week_index - 1) // cadence) * cadence + 1
            trailing = program.duration_weeks - block_start + 1
            training_weeks = cadence - 1
            if trailing < training_weeks:
                return PhaseTag.MAINTENANCE
        else:
            training_weeks = program.duration_weeks

        k = self._position_in_block(week_index, cadence)
        if program.progression == ProgressionShape.WAVE:
            if k % len(WAVE_PATTERN) == len(WAVE_PATTERN) - 1:
                return PhaseTag.INTENSIFICATION
            if k >= len(WAVE_PATTERN):
                return PhaseTag.MAINTENANCE
            return PhaseTag.ACCUMULATION
        final_third = math.ceil(training_weeks / 3)
        if training_weeks >= 3 and k >= training_weeks - final_third:
            return PhaseTag.INTENSIFICATION
        return PhaseTag.ACCUMULATION

    def build_days(self, program: ProgramDefinition) -> Tuple[TrainingDay, ...]:
        """
        The 7-day skeleton shared by every week of a program.

        Split sessions and goal day types are both assigned round-robin in
        training-day order, restarting each week.
        """
        rotation = SPLIT_DEFINITIONS[program.split]
        day_types = GOAL_DAY_TYPES[program.goal]
        positions = training_positions(program.sessions_per_week)

        days = []
        training_index = 0
        for position in range(1, DAYS_PER_WEEK + 1):
            if position not in positions:
                days.append(TrainingDay(position=position, day_type=DayType.REST))
                continue
            label, groups = rotation[training_index % len(rotation)]
            days.append(
                TrainingDay(
                    position=position,
                    day_type=day_types[training_index % len(day_types)],
                    session_label=label,
                    muscle_groups=groups,
                )
            )
            training_index += 1
        return tuple(days)

    @staticmethod
    def _position_in_block(week_index: int, cadence: int) -> int:
        """0-based index of a non-deload week within its block."""
        if cadence <= 0:
            return week_index - 1
        return (week_index - 1) % cadence
