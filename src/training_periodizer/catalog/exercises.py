"""
Exercise catalog adapter.

The exercise store is an external collaborator reached through the
``ExerciseLookup`` protocol. Records come back as plain mappings, in
either snake_case or camelCase, and the adapter normalizes them into
``ExerciseInfo`` values the engine can reason about.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple
import logging

from ..exceptions import UnknownExerciseReferenceError
from ..models.exercise import ExerciseCategory, ExerciseInfo, LoggedSet, MuscleGroup, MuscleGroupLoad
from ..utils import round_to


logger = logging.getLogger(__name__)


class ExerciseLookup(Protocol):
    """Read access to an exercise store."""

    def get(self, exercise_id: str) -> Optional[Mapping[str, Any]]:
        ...

    def list_all(self) -> Iterable[Mapping[str, Any]]:
        ...


# Store muscle names that map onto a tracked group
MUSCLE_ALIASES: Dict[str, MuscleGroup] = {
    "front_delts": MuscleGroup.SHOULDERS,
    "lateral_delts": MuscleGroup.SHOULDERS,
    "rear_delts": MuscleGroup.SHOULDERS,
    "delts": MuscleGroup.SHOULDERS,
    "lats": MuscleGroup.BACK,
    "traps": MuscleGroup.BACK,
    "upper_back": MuscleGroup.BACK,
    "lower_back": MuscleGroup.BACK,
    "quads": MuscleGroup.QUADRICEPS,
    "abs": MuscleGroup.CORE,
    "obliques": MuscleGroup.CORE,
}

EQUIPMENT_CATEGORIES: Dict[str, ExerciseCategory] = {
    "barbell": ExerciseCategory.FREE_WEIGHTS,
    "dumbbell": ExerciseCategory.FREE_WEIGHTS,
    "kettlebell": ExerciseCategory.FREE_WEIGHTS,
    "specialty_bar": ExerciseCategory.FREE_WEIGHTS,
    "machine": ExerciseCategory.MACHINE,
    "smith_machine": ExerciseCategory.MACHINE,
    "cable": ExerciseCategory.CABLE,
    "bodyweight": ExerciseCategory.BODYWEIGHT,
}


DEFAULT_EXERCISES: Tuple[Dict[str, Any], ...] = (
    # Chest
    {"id": "barbell-bench-press", "name": "Barbell Bench Press", "primaryMuscles": ["chest"],
     "secondaryMuscles": ["triceps", "front_delts"], "movementPattern": "horizontal_push",
     "equipment": ["barbell"], "isCompound": True,
     "alternatives": ["dumbbell-bench-press", "machine-chest-press"]},
    {"id": "dumbbell-bench-press", "name": "Dumbbell Bench Press", "primaryMuscles": ["chest"],
     "secondaryMuscles": ["triceps", "front_delts"], "movementPattern": "horizontal_push",
     "equipment": ["dumbbell"], "isCompound": True,
     "alternatives": ["barbell-bench-press", "machine-chest-press"]},
    {"id": "machine-chest-press", "name": "Machine Chest Press", "primaryMuscles": ["chest"],
     "secondaryMuscles": ["triceps"], "movementPattern": "horizontal_push",
     "equipment": ["machine"], "isCompound": True,
     "alternatives": ["barbell-bench-press", "dumbbell-bench-press"]},
    {"id": "cable-fly", "name": "Cable Fly", "primaryMuscles": ["chest"],
     "movementPattern": "isolation", "equipment": ["cable"], "isCompound": False},
    # Back
    {"id": "barbell-row", "name": "Barbell Row", "primaryMuscles": ["upper_back", "lats"],
     "secondaryMuscles": ["biceps", "rear_delts"], "movementPattern": "horizontal_pull",
     "equipment": ["barbell"], "isCompound": True, "alternatives": ["seated-cable-row"]},
    {"id": "pull-up", "name": "Pull-Up", "primaryMuscles": ["lats"],
     "secondaryMuscles": ["biceps"], "movementPattern": "vertical_pull",
     "equipment": ["bodyweight"], "isCompound": True, "alternatives": ["lat-pulldown"]},
    {"id": "lat-pulldown", "name": "Lat Pulldown", "primaryMuscles": ["lats"],
     "secondaryMuscles": ["biceps"], "movementPattern": "vertical_pull",
     "equipment": ["cable"], "isCompound": True, "alternatives": ["pull-up"]},
    {"id": "seated-cable-row", "name": "Seated Cable Row", "primaryMuscles": ["upper_back"],
     "secondaryMuscles": ["biceps"], "movementPattern": "horizontal_pull",
     "equipment": ["cable"], "isCompound": True, "alternatives": ["barbell-row"]},
    # Shoulders
    {"id": "overhead-press", "name": "Overhead Press", "primaryMuscles": ["front_delts"],
     "secondaryMuscles": ["triceps", "lateral_delts"], "movementPattern": "vertical_push",
     "equipment": ["barbell"], "isCompound": True, "alternatives": ["dumbbell-shoulder-press"]},
    {"id": "dumbbell-shoulder-press", "name": "Dumbbell Shoulder Press",
     "primaryMuscles": ["front_delts"], "secondaryMuscles": ["triceps"],
     "movementPattern": "vertical_push", "equipment": ["dumbbell"], "isCompound": True,
     "alternatives": ["overhead-press"]},
    {"id": "lateral-raise", "name": "Lateral Raise", "primaryMuscles": ["lateral_delts"],
     "movementPattern": "isolation", "equipment": ["dumbbell"], "isCompound": False},
    # Arms
    {"id": "barbell-curl", "name": "Barbell Curl", "primaryMuscles": ["biceps"],
     "movementPattern": "isolation", "equipment": ["barbell"], "isCompound": False,
     "alternatives": ["cable-curl"]},
    {"id": "cable-curl", "name": "Cable Curl", "primaryMuscles": ["biceps"],
     "movementPattern": "isolation", "equipment": ["cable"], "isCompound": False,
     "alternatives": ["barbell-curl"]},
    {"id": "triceps-pushdown", "name": "Triceps Pushdown", "primaryMuscles": ["triceps"],
     "movementPattern": "isolation", "equipment": ["cable"], "isCompound": False,
     "alternatives": ["close-grip-bench-press"]},
    {"id": "close-grip-bench-press", "name": "Close-Grip Bench Press",
     "primaryMuscles": ["triceps"], "secondaryMuscles": ["chest"],
     "movementPattern": "horizontal_push", "equipment": ["barbell"], "isCompound": True,
     "alternatives": ["triceps-pushdown"]},
    # Legs
    {"id": "back-squat", "name": "Back Squat", "primaryMuscles": ["quads", "glutes"],
     "secondaryMuscles": ["hamstrings", "lower_back"], "movementPattern": "squat",
     "equipment": ["barbell"], "isCompound": True, "alternatives": ["leg-press"]},
    {"id": "leg-press", "name": "Leg Press", "primaryMuscles": ["quads"],
     "secondaryMuscles": ["glutes"], "movementPattern": "squat",
     "equipment": ["machine"], "isCompound": True, "alternatives": ["back-squat"]},
    {"id": "leg-extension", "name": "Leg Extension", "primaryMuscles": ["quads"],
     "movementPattern": "isolation", "equipment": ["machine"], "isCompound": False},
    {"id": "romanian-deadlift", "name": "Romanian Deadlift",
     "primaryMuscles": ["hamstrings", "glutes"], "secondaryMuscles": ["lower_back"],
     "movementPattern": "hinge", "equipment": ["barbell"], "isCompound": True,
     "alternatives": ["lying-leg-curl"]},
    {"id": "lying-leg-curl", "name": "Lying Leg Curl", "primaryMuscles": ["hamstrings"],
     "movementPattern": "isolation", "equipment": ["machine"], "isCompound": False,
     "alternatives": ["romanian-deadlift"]},
    {"id": "hip-thrust", "name": "Hip Thrust", "primaryMuscles": ["glutes"],
     "secondaryMuscles": ["hamstrings"], "movementPattern": "hinge",
     "equipment": ["barbell"], "isCompound": True},
    {"id": "standing-calf-raise", "name": "Standing Calf Raise", "primaryMuscles": ["calves"],
     "movementPattern": "isolation", "equipment": ["machine"], "isCompound": False},
    # Core
    {"id": "plank", "name": "Plank", "primaryMuscles": ["abs"],
     "movementPattern": "core", "equipment": ["bodyweight"], "isCompound": False,
     "alternatives": ["cable-crunch"]},
    {"id": "cable-crunch", "name": "Cable Crunch", "primaryMuscles": ["abs"],
     "movementPattern": "core", "equipment": ["cable"], "isCompound": False,
     "alternatives": ["plank"]},
)


class InMemoryExerciseLookup:
    """Dictionary-backed exercise store, seeded with the bundled library by default."""

    def __init__(self, records: Optional[Iterable[Mapping[str, Any]]] = None) -> None:
        source = DEFAULT_EXERCISES if records is None else records
        self._records: Dict[str, Mapping[str, Any]] = {}
        for record in source:
            exercise_id = str(record.get("id") or record.get("exercise_id"))
            self._records[exercise_id] = record

    def get(self, exercise_id: str) -> Optional[Mapping[str, Any]]:
        return self._records.get(exercise_id)

    def list_all(self) -> List[Mapping[str, Any]]:
        return list(self._records.values())


def _field(record: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in record:
        return record[snake]
    return record.get(camel, default)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def normalize_muscles(names: Iterable[str]) -> Tuple[MuscleGroup, ...]:
    """Map store muscle names onto tracked groups; unmapped names are dropped."""
    groups: List[MuscleGroup] = []
    for raw in names:
        name = raw.strip().lower().replace("-", "_").replace(" ", "_")
        group = MUSCLE_ALIASES.get(name)
        if group is None:
            try:
                group = MuscleGroup(name)
            except ValueError:
                logger.debug("Ignoring untracked muscle '%s'", raw)
                continue
        if group not in groups:
            groups.append(group)
    return tuple(groups)


def normalize_exercise(record: Mapping[str, Any]) -> ExerciseInfo:
    """Convert a raw exercise record into an ExerciseInfo."""
    exercise_id = str(_field(record, "exercise_id", "id") or record.get("id"))
    is_compound = bool(_field(record, "is_compound", "isCompound", False))

    primary = normalize_muscles(
        _as_list(_field(record, "primary_muscles", "primaryMuscles"))
        or _as_list(_field(record, "muscle_group", "muscleGroup"))
    )
    secondary = tuple(
        m for m in normalize_muscles(
            _as_list(_field(record, "secondary_muscles", "secondaryMuscles"))
            or _as_list(_field(record, "secondary_muscle_groups", "secondaryMuscleGroups"))
        )
        if m not in primary
    )

    categories = {ExerciseCategory.COMPOUND if is_compound else ExerciseCategory.ISOLATION}
    for equipment in _as_list(record.get("equipment")):
        category = EQUIPMENT_CATEGORIES.get(equipment.strip().lower())
        if category is not None:
            categories.add(category)

    return ExerciseInfo(
        exercise_id=exercise_id,
        name=str(record.get("name") or exercise_id),
        primary_muscles=primary,
        secondary_muscles=secondary,
        categories=frozenset(categories),
        is_compound=is_compound,
        movement_pattern=_field(record, "movement_pattern", "movementPattern"),
        alternatives=tuple(_as_list(record.get("alternatives"))),
    )


class ExerciseCatalogAdapter:
    """Resolves exercise ids and selects exercises for muscle groups."""

    def __init__(self, lookup: Optional[ExerciseLookup] = None) -> None:
        self._lookup = lookup or InMemoryExerciseLookup()

    def resolve(self, exercise_id: str) -> ExerciseInfo:
        """
        Look up an exercise by id.

        Raises:
            UnknownExerciseReferenceError: if the store has no such exercise
        """
        record = self._lookup.get(exercise_id)
        if record is None:
            raise UnknownExerciseReferenceError(exercise_id)
        return normalize_exercise(record)

    def list_all(self) -> List[ExerciseInfo]:
        return sorted(
            (normalize_exercise(r) for r in self._lookup.list_all()),
            key=lambda e: e.exercise_id,
        )

    def select_for_muscle_groups(
        self,
        muscle_groups: Sequence[MuscleGroup],
        max_exercises: Optional[int] = None,
    ) -> List[ExerciseInfo]:
        """
        Pick exercises covering ``muscle_groups`` in order.

        One exercise per group not already covered by an earlier pick's
        primary muscles. Compound movements are preferred, ties broken by id,
        so the selection is deterministic for a given store.
        """
        catalog = self.list_all()
        selected: List[ExerciseInfo] = []
        covered = set()

        for group in muscle_groups:
            if group in covered:
                continue
            candidates = [
                e for e in catalog
                if group in e.primary_muscles and e not in selected
            ]
            if not candidates:
                logger.warning("No exercise in the catalog targets %s", group.value)
                continue
            candidates.sort(key=lambda e: (not e.is_compound, e.exercise_id))
            choice = candidates[0]
            selected.append(choice)
            covered.update(choice.primary_muscles)
            if max_exercises is not None and len(selected) >= max_exercises:
                break

        return selected

    def alternatives(self, exercise_id: str) -> List[ExerciseInfo]:
        """
        Substitutes for an exercise.

        Declared alternatives come first; otherwise exercises sharing the
        movement pattern and first primary muscle. Unresolvable declared ids
        are skipped.
        """
        exercise = self.resolve(exercise_id)
        result: List[ExerciseInfo] = []
        for alt_id in exercise.alternatives:
            record = self._lookup.get(alt_id)
            if record is None:
                logger.warning("Alternative '%s' of '%s' is not in the catalog", alt_id, exercise_id)
                continue
            result.append(normalize_exercise(record))
        if result:
            return result

        if not exercise.primary_muscles:
            return []
        target = exercise.primary_muscles[0]
        return [
            e for e in self.list_all()
            if e.exercise_id != exercise_id
            and e.movement_pattern == exercise.movement_pattern
            and target in e.primary_muscles
        ]

    def aggregate_session_logs(self, logs: Iterable[LoggedSet]) -> MuscleGroupLoad:
        """
        Collapse logged sets into per-muscle-group set counts and average RIR.

        Warm-up sets are ignored. Each working set counts once for every
        primary muscle of its exercise. Sets without RIR or RPE add to the
        count but not to the average.
        """
        counts: Dict[str, int] = {}
        rir_sums: Dict[str, float] = {}
        rir_counts: Dict[str, int] = {}
        cache: Dict[str, ExerciseInfo] = {}

        for logged in logs:
            if logged.is_warmup:
                continue
            if logged.exercise_id not in cache:
                cache[logged.exercise_id] = self.resolve(logged.exercise_id)
            exercise = cache[logged.exercise_id]
            rir = logged.effective_rir
            for group in exercise.primary_muscles:
                counts[group.value] = counts.get(group.value, 0) + 1
                if rir is not None:
                    rir_sums[group.value] = rir_sums.get(group.value, 0.0) + rir
                    rir_counts[group.value] = rir_counts.get(group.value, 0) + 1

        averages = {
            group: round_to(rir_sums[group] / rir_counts[group], 2)
            for group in rir_sums
        }
        return MuscleGroupLoad(set_counts=counts, average_rir=averages)
