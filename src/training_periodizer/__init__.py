"""Training program periodization and set prescription engine."""

__version__ = "0.1.0"

from training_periodizer.exceptions import (
    PeriodizerError,
    InvalidProgramDefinitionError,
    UnknownExerciseReferenceError,
    StaleFatigueStateError,
    ProgramNotFoundError,
    SlotNotFoundError,
)
from training_periodizer.models import (
    ProgramDefinition,
    ProgramWithSchedule,
    Microcycle,
    TrainingDay,
    ExerciseSlot,
    SetPrescription,
    Technique,
    FatigueState,
)
from training_periodizer.services import (
    PeriodizationScheduler,
    PrescriptionRulesEngine,
    TechniqueRecommendationEngine,
    FatigueReadinessEstimator,
    ProgramService,
)

__all__ = [
    "__version__",
    # Errors
    "PeriodizerError",
    "InvalidProgramDefinitionError",
    "UnknownExerciseReferenceError",
    "StaleFatigueStateError",
    "ProgramNotFoundError",
    "SlotNotFoundError",
    # Models
    "ProgramDefinition",
    "ProgramWithSchedule",
    "Microcycle",
    "TrainingDay",
    "ExerciseSlot",
    "SetPrescription",
    "Technique",
    "FatigueState",
    # Services
    "PeriodizationScheduler",
    "PrescriptionRulesEngine",
    "TechniqueRecommendationEngine",
    "FatigueReadinessEstimator",
    "ProgramService",
]
