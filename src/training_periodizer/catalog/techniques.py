"""
Intensification technique catalog.

The catalog is reference data: it is built once, kept in name order and
never mutated. Engines receive a catalog instance at construction so
tests can substitute their own fixtures via ``TechniqueCatalog.from_records``.
"""

from functools import lru_cache
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
import logging

from ..exceptions import ValidationError
from ..models.exercise import ExerciseCategory
from ..models.technique import Technique, TechniqueCategory, TechniqueDifficulty


logger = logging.getLogger(__name__)


ALL_EXERCISES = tuple(c.value for c in ExerciseCategory)


DEFAULT_TECHNIQUES: Tuple[Dict[str, Any], ...] = (
    # Intensity techniques
    {
        "key": "rest_pause",
        "name": "Rest-Pause",
        "category": "intensity",
        "difficulty": "intermediate",
        "suitable_exercises": ("compound", "isolation", "machine", "free_weights"),
        "rep_range": (8, 12),
        "set_range": (1, 3),
        "rir_range": (0, 1),
        "rest_range": (10, 20),
        "weekly_frequency": (1, 2),
        "description": "Take a set close to failure, rest 10-20 seconds, continue with the same load.",
        "implementation_notes": "1-3 mini-sets after the main set. Limit to 1-2 exercises per session.",
    },
    {
        "key": "drop_set",
        "name": "Drop Sets",
        "category": "intensity",
        "difficulty": "intermediate",
        "suitable_exercises": ("isolation", "machine", "cable", "free_weights"),
        "rep_range": (8, 12),
        "set_range": (1, 2),
        "rir_range": (0, 1),
        "weekly_frequency": (1, 2),
        "description": "Reach near failure, cut the load 20-30% and continue without rest.",
        "implementation_notes": "Best at the end of a session. Prepare the lighter loads in advance.",
    },
    {
        "key": "partial_reps",
        "name": "Partial Reps",
        "category": "intensity",
        "difficulty": "intermediate",
        "suitable_exercises": ("compound", "isolation", "machine", "free_weights"),
        "rep_range": (6, 10),
        "set_range": (1, 2),
        "rir_range": (0, 1),
        "weekly_frequency": (1, 2),
        "description": "Reps through a restricted range, usually the hardest portion of the lift.",
        "implementation_notes": "Add after full-range reps or use at sticking points. Never replace full reps.",
    },
    {
        "key": "myo_reps",
        "name": "Myo-Reps",
        "category": "intensity",
        "difficulty": "advanced",
        "suitable_exercises": ("isolation", "machine", "cable"),
        "rep_range": (3, 5),
        "set_range": (4, 8),
        "rir_range": (1, 2),
        "rest_range": (5, 10),
        "weekly_frequency": (1, 2),
        "description": "Activation set near failure followed by short mini-sets with 5-10 second pauses.",
        "implementation_notes": "Activation set of 12-15 reps, then mini-sets of 3-5 reps.",
    },
    {
        "key": "cluster_sets",
        "name": "Cluster Sets",
        "category": "intensity",
        "difficulty": "advanced",
        "suitable_exercises": ("compound", "free_weights", "machine"),
        "rep_range": (3, 5),
        "set_range": (3, 5),
        "rir_range": (1, 2),
        "rest_range": (10, 20),
        "weekly_frequency": (1, 2),
        "description": "Split a set into segments with micro-rests to handle heavier loads.",
        "implementation_notes": "Example: 5 reps, 15s rest, 5 reps, 15s rest, 5 reps counts as one set.",
    },
    {
        "key": "eccentric_overload",
        "name": "Eccentric Overload",
        "category": "intensity",
        "difficulty": "elite",
        "suitable_exercises": ("compound", "machine"),
        "rep_range": (3, 5),
        "set_range": (2, 4),
        "rir_range": (1, 2),
        "weekly_frequency": (1, 1),
        "description": "Supramaximal lowering phase with assisted or reduced-load concentric.",
        "implementation_notes": "Requires spotters or a machine that allows loading the negative only.",
    },
    # Time under tension techniques
    {
        "key": "tempo_training",
        "name": "Tempo Training",
        "category": "time_under_tension",
        "difficulty": "intermediate",
        "suitable_exercises": ALL_EXERCISES,
        "rep_range": (6, 12),
        "set_range": (2, 4),
        "rir_range": (2, 3),
        "weekly_frequency": (1, 3),
        "description": "Deliberately control eccentric, pause and concentric speed of each rep.",
        "implementation_notes": "Notation 4-1-2-0: 4s eccentric, 1s bottom pause, 2s concentric, no top pause.",
    },
    {
        "key": "isometric_holds",
        "name": "Isometric Holds",
        "category": "time_under_tension",
        "difficulty": "intermediate",
        "suitable_exercises": ALL_EXERCISES,
        "rep_range": (3, 6),
        "set_range": (2, 4),
        "rir_range": (1, 3),
        "weekly_frequency": (1, 3),
        "description": "Hold the position of peak tension for several seconds under load.",
        "implementation_notes": "Hold 3-10 seconds. Keep breathing during the hold.",
    },
    # Metabolic techniques
    {
        "key": "supersets",
        "name": "Supersets",
        "category": "metabolic",
        "difficulty": "intermediate",
        "suitable_exercises": ALL_EXERCISES,
        "rep_range": (8, 15),
        "set_range": (3, 4),
        "rir_range": (1, 3),
        "weekly_frequency": (1, 4),
        "description": "Two exercises back to back without rest, agonist or antagonist pairing.",
        "implementation_notes": "Rest only after both exercises are complete.",
    },
    {
        "key": "giant_sets",
        "name": "Giant Sets",
        "category": "metabolic",
        "difficulty": "advanced",
        "suitable_exercises": ALL_EXERCISES,
        "rep_range": (10, 15),
        "set_range": (2, 4),
        "rir_range": (1, 3),
        "weekly_frequency": (1, 2),
        "description": "Three to five exercises for related muscle groups performed without rest.",
        "implementation_notes": "Rest 2-3 minutes between full rounds.",
    },
    {
        "key": "emom",
        "name": "EMOM",
        "category": "metabolic",
        "difficulty": "advanced",
        "suitable_exercises": ("compound", "free_weights", "bodyweight"),
        "rep_range": (5, 10),
        "set_range": (8, 20),
        "rir_range": (2, 4),
        "weekly_frequency": (1, 2),
        "description": "A fixed number of reps at the start of every minute, resting the remainder.",
        "implementation_notes": "Pick reps that leave 15-30 seconds of rest. Typical duration 10-20 minutes.",
    },
    # Compound techniques
    {
        "key": "post_exhaustion",
        "name": "Post-Exhaustion",
        "category": "compound",
        "difficulty": "intermediate",
        "suitable_exercises": ("compound", "isolation"),
        "rep_range": (8, 12),
        "set_range": (2, 3),
        "rir_range": (1, 2),
        "weekly_frequency": (1, 2),
        "description": "An isolation exercise immediately after a compound lift for the same muscle.",
        "implementation_notes": "Example: bench press followed by flyes.",
    },
    {
        "key": "mechanical_drop_set",
        "name": "Mechanical Drop Set",
        "category": "compound",
        "difficulty": "advanced",
        "suitable_exercises": ("compound", "isolation"),
        "rep_range": (8, 12),
        "set_range": (1, 3),
        "rir_range": (0, 1),
        "weekly_frequency": (1, 2),
        "description": "Switch to a mechanically easier variation at failure and keep going.",
        "implementation_notes": "Example: incline press -> flat press -> decline press.",
    },
    {
        "key": "pre_exhaustion",
        "name": "Pre-Exhaustion",
        "category": "compound",
        "difficulty": "advanced",
        "suitable_exercises": ("isolation", "compound"),
        "rep_range": (10, 15),
        "set_range": (2, 4),
        "rir_range": (1, 2),
        "weekly_frequency": (1, 2),
        "description": "An isolation exercise immediately before a compound lift for the same muscle.",
        "implementation_notes": "Example: leg extensions -> squats, flyes -> bench press.",
    },
)


def _as_range(value: Any, field: str, key: str) -> Tuple[int, int]:
    try:
        low, high = (int(v) for v in value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Technique '{key}' has an invalid {field}: {value!r}",
            field=field,
        ) from None
    if low > high:
        raise ValidationError(f"Technique '{key}' has an inverted {field}: {value!r}", field=field)
    return low, high


def technique_from_record(record: Mapping[str, Any]) -> Technique:
    """Build a Technique from a plain mapping, validating every enum field."""
    key = str(record.get("key") or "")
    if not key:
        raise ValidationError("Technique record is missing 'key'", field="key")
    try:
        category = TechniqueCategory(record["category"])
        difficulty = TechniqueDifficulty(record["difficulty"])
        suitable = frozenset(ExerciseCategory(c) for c in record["suitable_exercises"])
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Technique '{key}' is malformed: {e}") from e

    rest = record.get("rest_range")
    return Technique(
        key=key,
        name=str(record.get("name") or key),
        category=category,
        difficulty=difficulty,
        suitable_exercises=suitable,
        rep_range=_as_range(record["rep_range"], "rep_range", key),
        set_range=_as_range(record["set_range"], "set_range", key),
        rir_range=_as_range(record["rir_range"], "rir_range", key),
        weekly_frequency=_as_range(record["weekly_frequency"], "weekly_frequency", key),
        rest_range=_as_range(rest, "rest_range", key) if rest else None,
        description=str(record.get("description", "")),
        implementation_notes=str(record.get("implementation_notes", "")),
    )


class TechniqueCatalog:
    """Immutable, name-ordered collection of techniques."""

    def __init__(self, techniques: Iterable[Technique]) -> None:
        ordered = sorted(techniques, key=lambda t: (t.name, t.key))
        keys = [t.key for t in ordered]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValidationError(f"Duplicate technique keys: {', '.join(duplicates)}")
        self._techniques: Tuple[Technique, ...] = tuple(ordered)
        self._by_key: Dict[str, Technique] = {t.key: t for t in ordered}

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "TechniqueCatalog":
        return cls(technique_from_record(r) for r in records)

    def __iter__(self) -> Iterator[Technique]:
        return iter(self._techniques)

    def __len__(self) -> int:
        return len(self._techniques)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def all(self) -> Tuple[Technique, ...]:
        return self._techniques

    def get(self, key: str) -> Optional[Technique]:
        return self._by_key.get(key)

    def by_name(self, name: str) -> Optional[Technique]:
        for technique in self._techniques:
            if technique.name == name:
                return technique
        return None

    def by_category(self, category: TechniqueCategory) -> List[Technique]:
        return [t for t in self._techniques if t.category == category]


@lru_cache
def get_default_catalog() -> TechniqueCatalog:
    """Load the bundled technique catalog once."""
    catalog = TechniqueCatalog.from_records(DEFAULT_TECHNIQUES)
    logger.debug("Loaded %d techniques", len(catalog))
    return catalog
