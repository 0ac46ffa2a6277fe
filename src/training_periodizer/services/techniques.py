"""
Technique recommendation engine.

Filters the technique catalog by level, goal and exercise suitability.
The engine holds no mutable state; weekly usage is tracked by the caller
in a ``TechniqueUsage`` and passed in.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from ..catalog.techniques import TechniqueCatalog, get_default_catalog
from ..models.exercise import ExerciseCategory
from ..models.program import TrainingGoal, TrainingLevel
from ..models.technique import Technique, TechniqueCategory, TechniqueDifficulty


LEVEL_DIFFICULTIES: Dict[TrainingLevel, FrozenSet[TechniqueDifficulty]] = {
    TrainingLevel.BEGINNER: frozenset({TechniqueDifficulty.INTERMEDIATE}),
    TrainingLevel.INTERMEDIATE: frozenset({
        TechniqueDifficulty.INTERMEDIATE,
        TechniqueDifficulty.ADVANCED,
    }),
    TrainingLevel.ADVANCED: frozenset({
        TechniqueDifficulty.INTERMEDIATE,
        TechniqueDifficulty.ADVANCED,
        TechniqueDifficulty.ELITE,
    }),
    TrainingLevel.ELITE: frozenset({
        TechniqueDifficulty.ADVANCED,
        TechniqueDifficulty.ELITE,
    }),
}

GOAL_CATEGORIES: Dict[TrainingGoal, FrozenSet[TechniqueCategory]] = {
    TrainingGoal.STRENGTH: frozenset({TechniqueCategory.INTENSITY, TechniqueCategory.COMPOUND}),
    TrainingGoal.HYPERTROPHY: frozenset({
        TechniqueCategory.INTENSITY,
        TechniqueCategory.TIME_UNDER_TENSION,
        TechniqueCategory.COMPOUND,
    }),
    TrainingGoal.ENDURANCE: frozenset({
        TechniqueCategory.METABOLIC,
        TechniqueCategory.TIME_UNDER_TENSION,
    }),
    TrainingGoal.POWER: frozenset({TechniqueCategory.INTENSITY, TechniqueCategory.COMPOUND}),
    TrainingGoal.WEIGHT_LOSS: frozenset({TechniqueCategory.METABOLIC, TechniqueCategory.COMPOUND}),
    TrainingGoal.GENERAL_FITNESS: frozenset({
        TechniqueCategory.TIME_UNDER_TENSION,
        TechniqueCategory.METABOLIC,
    }),
}


@dataclass
class TechniqueUsage:
    """Per-week count of technique uses, keyed by technique key."""
    counts: Dict[str, int] = field(default_factory=dict)

    def record(self, technique: Technique) -> None:
        self.counts[technique.key] = self.counts.get(technique.key, 0) + 1

    def used(self, technique: Technique) -> int:
        return self.counts.get(technique.key, 0)

    def exhausted(self, technique: Technique) -> bool:
        return self.used(technique) >= technique.weekly_ceiling

    def reset(self) -> None:
        self.counts.clear()


CategoryInput = Union[ExerciseCategory, Iterable[ExerciseCategory]]


def _as_category_set(exercise_category: CategoryInput) -> FrozenSet[ExerciseCategory]:
    if isinstance(exercise_category, ExerciseCategory):
        return frozenset({exercise_category})
    return frozenset(exercise_category)


class TechniqueRecommendationEngine:
    """Stateless technique filter over an immutable catalog."""

    def __init__(self, catalog: Optional[TechniqueCatalog] = None) -> None:
        self._catalog = catalog or get_default_catalog()

    @property
    def catalog(self) -> TechniqueCatalog:
        return self._catalog

    def recommend(
        self,
        level: TrainingLevel,
        goal: TrainingGoal,
        exercise_category: CategoryInput,
        usage: Optional[TechniqueUsage] = None,
    ) -> List[Technique]:
        """
        Techniques suitable for a slot, ordered by catalog name.

        Args:
            level: Training level of the program owner
            goal: Program goal
            exercise_category: The slot exercise's category, or all of its categories
            usage: Uses so far this week; techniques at their weekly ceiling are dropped

        Returns:
            Matching techniques, possibly empty
        """
        difficulties = LEVEL_DIFFICULTIES[level]
        categories = GOAL_CATEGORIES[goal]
        exercise_categories = _as_category_set(exercise_category)

        return [
            technique
            for technique in self._catalog.all()
            if technique.difficulty in difficulties
            and technique.category in categories
            and technique.suits(exercise_categories)
            and (usage is None or not usage.exhausted(technique))
        ]
