"""Data models for the periodization engine."""

from .program import (
    # Enums
    TrainingGoal,
    TrainingLevel,
    SplitType,
    ProgressionShape,
    # Core dataclasses
    ProgramDefinition,
    # Utility functions
    parse_enum,
)

from .schedule import (
    # Enums
    PhaseTag,
    DayType,
    DeloadReason,
    # Core dataclasses
    WeekMultipliers,
    SetPrescription,
    ExerciseSlot,
    TrainingDay,
    Microcycle,
    SkippedSlot,
    ProgramWithSchedule,
)

from .exercise import (
    MuscleGroup,
    ExerciseCategory,
    ExerciseInfo,
    LoggedSet,
    MuscleGroupLoad,
)

from .technique import (
    TechniqueCategory,
    TechniqueDifficulty,
    Technique,
)

from .fatigue import (
    FatigueStatus,
    FatigueTrend,
    StressEntry,
    FatigueState,
    SessionOutcome,
    FatigueThresholds,
)

__all__ = [
    # Program
    "TrainingGoal",
    "TrainingLevel",
    "SplitType",
    "ProgressionShape",
    "ProgramDefinition",
    "parse_enum",
    # Schedule
    "PhaseTag",
    "DayType",
    "DeloadReason",
    "WeekMultipliers",
    "SetPrescription",
    "ExerciseSlot",
    "TrainingDay",
    "Microcycle",
    "SkippedSlot",
    "ProgramWithSchedule",
    # Exercise
    "MuscleGroup",
    "ExerciseCategory",
    "ExerciseInfo",
    "LoggedSet",
    "MuscleGroupLoad",
    # Technique
    "TechniqueCategory",
    "TechniqueDifficulty",
    "Technique",
    # Fatigue
    "FatigueStatus",
    "FatigueTrend",
    "StressEntry",
    "FatigueState",
    "SessionOutcome",
    "FatigueThresholds",
]
