"""Reference catalogs: intensification techniques and exercise metadata."""

from .techniques import (
    DEFAULT_TECHNIQUES,
    TechniqueCatalog,
    get_default_catalog,
    technique_from_record,
)
from .exercises import (
    DEFAULT_EXERCISES,
    ExerciseCatalogAdapter,
    ExerciseLookup,
    InMemoryExerciseLookup,
    normalize_exercise,
    normalize_muscles,
)

__all__ = [
    "DEFAULT_TECHNIQUES",
    "TechniqueCatalog",
    "get_default_catalog",
    "technique_from_record",
    "DEFAULT_EXERCISES",
    "ExerciseCatalogAdapter",
    "ExerciseLookup",
    "InMemoryExerciseLookup",
    "normalize_exercise",
    "normalize_muscles",
]
