"""Exercise metadata models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class MuscleGroup(str, Enum):
    """Muscle groups tracked for split coverage and fatigue."""
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    QUADRICEPS = "quadriceps"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    CORE = "core"


class ExerciseCategory(str, Enum):
    """Exercise suitability categories used by the technique matrix."""
    COMPOUND = "compound"
    ISOLATION = "isolation"
    MACHINE = "machine"
    FREE_WEIGHTS = "free_weights"
    CABLE = "cable"
    BODYWEIGHT = "bodyweight"


@dataclass(frozen=True)
class ExerciseInfo:
    """
    Normalized exercise record as the engine consumes it.

    Produced by the exercise catalog adapter from whatever shape the
    external exercise store returns.
    """
    exercise_id: str
    name: str
    primary_muscles: Tuple[MuscleGroup, ...]
    secondary_muscles: Tuple[MuscleGroup, ...] = ()
    categories: FrozenSet[ExerciseCategory] = frozenset()
    is_compound: bool = False
    movement_pattern: Optional[str] = None
    alternatives: Tuple[str, ...] = ()

    @property
    def muscle_groups(self) -> Tuple[MuscleGroup, ...]:
        """Primary then secondary muscles, without duplicates."""
        seen = []
        for group in self.primary_muscles + self.secondary_muscles:
            if group not in seen:
                seen.append(group)
        return tuple(seen)

    @property
    def primary_category(self) -> ExerciseCategory:
        """Compound/isolation classification."""
        return ExerciseCategory.COMPOUND if self.is_compound else ExerciseCategory.ISOLATION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "exercise_id": self.exercise_id,
            "name": self.name,
            "primary_muscles": [m.value for m in self.primary_muscles],
            "secondary_muscles": [m.value for m in self.secondary_muscles],
            "categories": sorted(c.value for c in self.categories),
            "is_compound": self.is_compound,
            "movement_pattern": self.movement_pattern,
            "alternatives": list(self.alternatives),
        }


@dataclass(frozen=True)
class LoggedSet:
    """One set actually performed, as stored by the session log collaborator."""
    exercise_id: str
    reps: int
    rir: Optional[float] = None
    rpe: Optional[float] = None
    is_warmup: bool = False

    @property
    def effective_rir(self) -> Optional[float]:
        """RIR as logged, or derived from RPE (RIR = 10 - RPE)."""
        if self.rir is not None:
            return float(self.rir)
        if self.rpe is not None:
            return max(0.0, 10.0 - float(self.rpe))
        return None


@dataclass
class MuscleGroupLoad:
    """Aggregated per-muscle-group work from one session."""
    set_counts: Dict[str, int] = field(default_factory=dict)
    average_rir: Dict[str, float] = field(default_factory=dict)
