"""Intensification technique models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .exercise import ExerciseCategory


class TechniqueCategory(str, Enum):
    """What a technique manipulates."""
    INTENSITY = "intensity"
    TIME_UNDER_TENSION = "time_under_tension"
    METABOLIC = "metabolic"
    COMPOUND = "compound"


class TechniqueDifficulty(str, Enum):
    """Minimum experience a technique is meant for."""
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ELITE = "elite"


Range = Tuple[int, int]


@dataclass(frozen=True)
class Technique:
    """A read-only catalog entry describing an intensification technique."""
    key: str
    name: str
    category: TechniqueCategory
    difficulty: TechniqueDifficulty
    suitable_exercises: FrozenSet[ExerciseCategory]
    rep_range: Range
    set_range: Range
    rir_range: Range
    weekly_frequency: Range  # Uses per week (min, max)
    rest_range: Optional[Range] = None  # Intra-set rest in seconds
    description: str = ""
    implementation_notes: str = ""

    @property
    def weekly_ceiling(self) -> int:
        """Maximum number of uses per week."""
        return self.weekly_frequency[1]

    def suits(self, categories: FrozenSet[ExerciseCategory]) -> bool:
        """Whether the technique can be applied to an exercise with these categories."""
        return bool(self.suitable_exercises & categories)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "name": self.name,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "suitable_exercises": sorted(c.value for c in self.suitable_exercises),
            "rep_range": list(self.rep_range),
            "set_range": list(self.set_range),
            "rir_range": list(self.rir_range),
            "rest_range": list(self.rest_range) if self.rest_range else None,
            "weekly_frequency": list(self.weekly_frequency),
            "description": self.description,
            "implementation_notes": self.implementation_notes,
        }
