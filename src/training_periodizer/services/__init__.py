"""Engine services."""

from .base import BaseService
from .prescription import PrescriptionRulesEngine, PRESCRIPTION_TABLE
from .scheduler import PeriodizationScheduler, muscle_group_frequency, deload_multipliers
from .techniques import TechniqueRecommendationEngine, TechniqueUsage
from .fatigue import FatigueReadinessEstimator
from .program_service import ProgramService

__all__ = [
    "BaseService",
    "PrescriptionRulesEngine",
    "PRESCRIPTION_TABLE",
    "PeriodizationScheduler",
    "muscle_group_frequency",
    "deload_multipliers",
    "TechniqueRecommendationEngine",
    "TechniqueUsage",
    "FatigueReadinessEstimator",
    "ProgramService",
]
